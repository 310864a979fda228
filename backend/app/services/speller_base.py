"""
SpellNote Backend - Abstract Spell Checker Interface
======================================================

What:  Abstract base class for the outbound spell checking client.
How:   Concrete implementations inherit from SpellChecker and implement
       check_text() and health_check().
Who:   Called by CorrectionPipeline (check_text) and the health route.

The interface stops at raw bytes on purpose: decoding lives in
ResponseDecoder so a response can be replayed through the decoder in tests
without a client.
"""

from abc import ABC, abstractmethod


class SpellChecker(ABC):
    """
    Abstract interface for an HTTP spell checking service.

    Contract:
        - check_text() sends the whole text and returns the raw response body
        - Implementations translate every failure into TransportFailure or
          ServiceFailure; no third-party exception escapes
        - Instances hold configuration only, never per-request state

    Implementations:
        - YandexSpellerClient: form-encoded POST to Yandex Speller checkText
    """

    @abstractmethod
    async def check_text(self, text: str) -> bytes:
        """
        Submit text for checking.

        Args:
            text: The full note text. Empty text is sent as-is; callers that
                  want to skip the round trip must do so themselves.

        Returns:
            bytes: The response body of a 2xx answer, undecoded.

        Raises:
            TransportFailure: The request could not be built, sent, or timed out.
            ServiceFailure: The service answered with a non-2xx status.
        """
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """Return True if the service answers a trivial check with 2xx."""
        ...
