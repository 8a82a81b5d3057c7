"""Exception hierarchy for configuration-level and per-address failures."""

from __future__ import annotations

from collections.abc import Sequence


class AtosError(Exception):
    """Base class for every error atosym raises on purpose."""


class ParseError(AtosError):
    """The container or object format is malformed or unsupported."""


class InvalidIdentifier(AtosError):
    """A UUID string is not 32 hex digits."""


class FilterMismatch(AtosError):
    """A non-fat image contradicts the supplied architecture or UUID filter."""


class InvalidAddress(AtosError):
    """A query address cannot be mapped into the image's address space."""


class SelectionError(AtosError):
    """A fat container could not be narrowed to exactly one slice."""

    def __init__(self, message: str, candidates: Sequence[str] = ()) -> None:
        self.candidates = tuple(candidates)
        if self.candidates:
            message = message + "\n" + "\n".join(self.candidates)
        super().__init__(message)


class SelectionAmbiguous(SelectionError):
    pass


class SelectionNoMatch(SelectionError):
    pass
