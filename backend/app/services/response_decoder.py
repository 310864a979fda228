"""
SpellNote Backend - Spell Checker Response Decoder
====================================================

What:  Turns the spell checker's raw JSON body into CorrectionCandidate values.
Who:   Called by CorrectionPipeline between the HTTP call and reconstruction.

Policy:
    - Anything that is not a JSON array of objects with integer `pos`/`len`
      and a string list `s` raises DecodeFailure. A broken body is never
      read as "no corrections".
    - A structurally valid item with an empty `s`, or a negative `pos`/`len`,
      raises MalformedCandidate and aborts the whole decode. Items are never
      skipped.
    - Source order is preserved. Ordering and overlap are checked by
      TextReconstructor, which also knows the text length.
"""

import logging
from typing import List

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from app.exceptions import DecodeFailure, MalformedCandidate
from app.schemas.correction import CorrectionCandidate, SpellerResponseItem

logger = logging.getLogger(__name__)

_response_adapter = TypeAdapter(List[SpellerResponseItem])


class ResponseDecoder:
    """Stateless; one instance may be shared by any number of pipelines."""

    def decode(self, raw: bytes) -> List[CorrectionCandidate]:
        """
        Parse a response body.

        Args:
            raw: The undecoded 2xx response body.

        Returns:
            Candidates in the order the service listed them.

        Raises:
            DecodeFailure: Invalid JSON, wrong top-level type, or a malformed item.
            MalformedCandidate: An item that parses but cannot be applied.
        """
        try:
            items = _response_adapter.validate_json(raw)
        except PydanticValidationError as e:
            errors = e.errors(include_url=False, include_input=False)
            logger.warning(
                "Undecodable speller response (%d bytes): %s",
                len(raw),
                errors[0]["msg"] if errors else "unknown",
            )
            raise DecodeFailure(
                context={
                    "size": len(raw),
                    "errors": [
                        {"loc": list(err["loc"]), "msg": err["msg"]} for err in errors[:5]
                    ],
                },
            ) from e

        candidates = [self._to_candidate(index, item) for index, item in enumerate(items)]
        logger.debug("Decoded %d correction candidates", len(candidates))
        return candidates

    @staticmethod
    def _to_candidate(index: int, item: SpellerResponseItem) -> CorrectionCandidate:
        if not item.s:
            raise MalformedCandidate("no suggestions", index=index)
        if item.pos < 0:
            raise MalformedCandidate(f"negative position {item.pos}", index=index)
        if item.len < 0:
            raise MalformedCandidate(f"negative length {item.len}", index=index)

        return CorrectionCandidate(
            position=item.pos,
            length=item.len,
            suggestions=tuple(item.s),
            word=item.word,
            code=item.code,
        )
