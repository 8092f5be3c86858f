"""Exceptions raised while decoding, resolving and encoding SenML packs."""

from __future__ import annotations

from typing import Optional


class SenMLError(ValueError):
    """Base class for every rejection of an input pack."""

    code = "senml_error"


class UnsupportedFormatError(SenMLError):
    code = "unsupported_format"


class DecodeError(SenMLError):
    code = "decode_error"


class EncodeError(SenMLError):
    code = "encode_error"


class ResolveError(SenMLError):
    """Raised by the resolver for the first invalid record of a pack."""

    code = "resolve_error"

    def __init__(self, message: str, record_index: Optional[int] = None) -> None:
        super().__init__(message)
        self.record_index = record_index

    def __str__(self) -> str:
        message = super().__str__()
        if self.record_index is None:
            return message
        return f"record {self.record_index}: {message}"


class UnsupportedVersionError(ResolveError):
    code = "unsupported_version"


class InconsistentVersionError(ResolveError):
    code = "inconsistent_version"


class EmptyNameError(ResolveError):
    code = "empty_name"


class InvalidNameCharactersError(ResolveError):
    code = "invalid_name_characters"


class InvalidNameStartError(ResolveError):
    code = "invalid_name_start"


class MissingValueError(ResolveError):
    code = "missing_value"
