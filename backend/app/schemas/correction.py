"""
SpellNote Backend - Correction Data Types
===========================================

What:  The wire shape of one spell checker finding, and the in-process
       CorrectionCandidate built from it.
Who:   SpellerResponseItem is used only by ResponseDecoder; CorrectionCandidate
       flows from ResponseDecoder to TextReconstructor.

Wire format (one array element):
    {"code": 1, "pos": 19, "row": 0, "col": 19, "len": 4, "word": "catt", "s": ["cat"]}

Offsets (`pos`, `len`) are counted in Unicode code points, which is how
Python `str` is indexed. Text is never encoded to bytes before slicing.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field, StrictInt, StrictStr


class SpellerResponseItem(BaseModel):
    """
    One element of the spell checker's JSON array.

    Strict types: "20" or 20.5 for `pos` is a contract violation, not
    something to coerce. Unknown keys are ignored.
    """

    pos: StrictInt = Field(description="Start offset of the misspelled span")
    len: StrictInt = Field(description="Length of the misspelled span")
    s: List[StrictStr] = Field(description="Suggested replacements, best first")

    # Diagnostic fields, not needed for reconstruction
    code: Optional[StrictInt] = Field(default=None, description="Error category code")
    word: Optional[StrictStr] = Field(default=None, description="The misspelled word")
    row: Optional[StrictInt] = Field(default=None)
    col: Optional[StrictInt] = Field(default=None)


@dataclass(frozen=True)
class CorrectionCandidate:
    """One proposed fix: replace text[position:position + length] with suggestions[0]."""

    position: int
    length: int
    suggestions: Tuple[str, ...]
    word: Optional[str] = field(default=None, compare=False)
    code: Optional[int] = field(default=None, compare=False)

    @property
    def end(self) -> int:
        return self.position + self.length

    @property
    def replacement(self) -> str:
        return self.suggestions[0]
