"""
SpellNote Backend - Correction Pipeline
=========================================

What:  The single entry point for text correction: `await correct(text)`.
How:   Composes SpellChecker → ResponseDecoder → TextReconstructor.
Who:   Called by NoteService.create_note() after authentication, before the
       note is persisted.

Flow:
    ┌────────┐    ┌──────────────┐    ┌───────────────┐    ┌──────────────────┐
    │  text  │───▶│ SpellChecker │───▶│ ResponseDecoder│───▶│ TextReconstructor│───▶ corrected
    └────────┘    │   (bytes)    │    │  (candidates) │    │   (one pass)     │
                  └──────────────┘    └───────────────┘    └──────────────────┘

Any step's failure propagates as a CorrectionError subclass. The pipeline
never substitutes the original text for a failed correction; that decision
belongs to the caller.

The pipeline holds only its three collaborators and no per-call state, so a
single instance is safe to share between concurrent requests.
"""

import logging
from typing import Optional

from app.config import Settings
from app.services.response_decoder import ResponseDecoder
from app.services.speller_base import SpellChecker
from app.services.text_reconstructor import TextReconstructor
from app.services.yandex_speller import YandexSpellerClient

logger = logging.getLogger(__name__)


class CorrectionPipeline:
    """
    Orchestrates one correction pass.

    Args:
        speller:       Outbound client (required).
        decoder:       Defaults to a new ResponseDecoder.
        reconstructor: Defaults to a new TextReconstructor.
    """

    def __init__(
        self,
        speller: SpellChecker,
        decoder: Optional[ResponseDecoder] = None,
        reconstructor: Optional[TextReconstructor] = None,
    ):
        self.speller = speller
        self.decoder = decoder or ResponseDecoder()
        self.reconstructor = reconstructor or TextReconstructor()

    @classmethod
    def from_settings(cls, config: Settings) -> "CorrectionPipeline":
        """Build the production pipeline from explicit configuration."""
        return cls(
            speller=YandexSpellerClient(
                api_url=config.speller_api_url,
                timeout=config.speller_timeout,
                max_attempts=config.speller_retry_max_attempts,
                retry_min_wait=config.speller_retry_min_wait,
                retry_max_wait=config.speller_retry_max_wait,
            )
        )

    async def correct(self, text: str) -> str:
        """
        Return `text` with every reported misspelling replaced by its first
        suggestion.

        Empty text returns "" without contacting the service.

        Raises:
            TransportFailure:   The service could not be reached or timed out.
            ServiceFailure:     The service answered with a non-2xx status.
            DecodeFailure:      The response body is not a candidate list.
            MalformedCandidate: A candidate cannot be applied to `text`.
        """
        if not text:
            return ""

        raw = await self.speller.check_text(text)
        candidates = self.decoder.decode(raw)
        corrected = self.reconstructor.reconstruct(text, candidates)

        logger.info(
            "Corrected text: %d candidates applied, %d → %d chars",
            len(candidates),
            len(text),
            len(corrected),
        )
        return corrected
