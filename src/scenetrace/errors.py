"""Error types raised while turning scene text into an image.

Parse and validation failures are recoverable: the caller gets the exception
and no image is produced. Encoding failures indicate an internal buffer
mismatch and are not expected for well-formed render targets.
"""

from __future__ import annotations


class SceneError(Exception):
    """Base class for all scenetrace errors.

    Attributes:
        message: Human readable description of the failure.
        line_number: 1-based line in the scene text, or None when the error
            is not tied to a single line (e.g. a missing directive).
        directive: The directive keyword involved, or None.
    """

    def __init__(
        self,
        message: str,
        *,
        line_number: int | None = None,
        directive: str | None = None,
    ) -> None:
        self.message = message
        self.line_number = line_number
        self.directive = directive
        super().__init__(self._format())

    def _format(self) -> str:
        if self.line_number is not None and self.directive:
            return f"line {self.line_number} ({self.directive}): {self.message}"
        if self.line_number is not None:
            return f"line {self.line_number}: {self.message}"
        if self.directive:
            return f"{self.directive}: {self.message}"
        return self.message


class ParseError(SceneError, ValueError):
    """Malformed scene text: unknown directive, bad field count or token,
    duplicate or missing required directive."""


class ValidationError(SceneError, ValueError):
    """Well-formed scene text describing an invalid scene."""


class EncodingError(SceneError, RuntimeError):
    """Raster buffer does not match the declared image dimensions."""
