"""
SpellNote Backend - Text Reconstructor
========================================

What:  Rebuilds a corrected string from the original text and a list of
       positional replacements.
How:   One left-to-right pass with a cursor into the original text:

           text:    I have a dog and a catt
                                       ^^^^   position=19, length=4, s=["cat"]
           out:     text[0:19] + "cat" + text[23:]

Candidates must arrive ascending by position and must not overlap. Both are
checked before any output is produced; violations raise MalformedCandidate
rather than splicing garbage. Out-of-order input is rejected, not sorted.

Offsets index Python `str`, i.e. Unicode code points.
"""

from typing import List, Sequence

from app.exceptions import MalformedCandidate
from app.schemas.correction import CorrectionCandidate


class TextReconstructor:

    def reconstruct(self, text: str, candidates: Sequence[CorrectionCandidate]) -> str:
        """
        Apply every candidate's first suggestion to `text`.

        Returns `text` unchanged when `candidates` is empty.

        Raises:
            MalformedCandidate: empty suggestions, span outside the text,
                descending position, or overlap with the previous span.
        """
        self.validate(text, candidates)

        parts: List[str] = []
        cursor = 0
        for candidate in candidates:
            parts.append(text[cursor:candidate.position])
            parts.append(candidate.replacement)
            cursor = candidate.end
        parts.append(text[cursor:])

        return "".join(parts)

    @staticmethod
    def validate(text: str, candidates: Sequence[CorrectionCandidate]) -> None:
        text_length = len(text)
        previous = None

        for index, candidate in enumerate(candidates):
            if not candidate.suggestions:
                raise MalformedCandidate("no suggestions", index=index)
            if candidate.position < 0 or candidate.length < 0:
                raise MalformedCandidate(
                    f"negative span ({candidate.position}, {candidate.length})",
                    index=index,
                )
            if candidate.end > text_length:
                raise MalformedCandidate(
                    f"span [{candidate.position}, {candidate.end}) exceeds text length {text_length}",
                    index=index,
                )
            if previous is not None:
                if candidate.position < previous.position:
                    raise MalformedCandidate(
                        f"position {candidate.position} precedes previous position {previous.position}",
                        index=index,
                    )
                if candidate.position < previous.end:
                    raise MalformedCandidate(
                        f"span [{candidate.position}, {candidate.end}) overlaps "
                        f"[{previous.position}, {previous.end})",
                        index=index,
                    )
            previous = candidate
