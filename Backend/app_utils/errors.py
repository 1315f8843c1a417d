"""
Pipeline Errors
Every failure carries the stage it happened in and a human readable reason,
so callers can log or report it without re-deriving state.
"""
from typing import Optional


class PipelineError(Exception):
    stage = "pipeline"

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason

    def to_detail(self) -> dict:
        return {"stage": self.stage, "reason": self.reason}


class FetchError(PipelineError):
    """The byte-fetch collaborator could not supply the object."""
    stage = "fetch"

    def __init__(self, key: str, reason: str, not_found: bool = False):
        super().__init__(f"{key}: {reason}")
        self.key = key
        self.not_found = not_found


class UnsupportedAlgorithm(PipelineError):
    stage = "request"

    def __init__(self, selector):
        super().__init__(f"Unsupported hash algorithm: {selector!r}")
        self.selector = selector


class DecodeError(PipelineError):
    """Bytes are not a valid image in a supported format."""
    stage = "decode"

    def __init__(self, reason: str, image_format: Optional[str] = None):
        if image_format:
            reason = f"{image_format}: {reason}"
        super().__init__(reason)
        self.image_format = image_format


class UnsupportedFormatError(DecodeError):
    pass


class HashMismatchError(PipelineError):
    stage = "compare"
