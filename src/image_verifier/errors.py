"""
Exception types raised by the verifier.
"""
from __future__ import annotations

from typing import Optional


class ImageVerifierError(Exception):
    """Base class for verifier errors."""


class FetchError(ImageVerifierError):
    """A request could not be completed (timeout, connection failure...)."""

    def __init__(self, message: str, url: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.url = url
