"""Error taxonomy for descriptor extraction.

Every error carries the descriptor identifier of the record being extracted
(when known) so callers can log and skip a single unit.
"""

from __future__ import annotations


class ExtractionError(Exception):
    """Base class for all extraction failures.

    Attributes:
        descriptor: Identifier of the descriptor being extracted (if known)
    """

    def __init__(self, message: str, descriptor: str | None = None):
        self.descriptor = descriptor
        super().__init__(message)

    def with_descriptor(self, descriptor: str | None) -> ExtractionError:
        """Attach the owning descriptor if none was recorded yet."""
        if self.descriptor is None and descriptor:
            self.descriptor = descriptor
        return self

    def __str__(self) -> str:
        message = super().__str__()
        if self.descriptor:
            return f"{message} (descriptor: {self.descriptor})"
        return message


class MissingRequiredField(ExtractionError):
    """A field that every descriptor of this kind must carry is absent."""

    def __init__(self, field: str, descriptor: str | None = None):
        self.field = field
        super().__init__(f"Missing required field '{field}'", descriptor)


class MalformedToken(ExtractionError):
    """A token string does not follow its expected grammar."""

    def __init__(self, token: object, expected: str, descriptor: str | None = None):
        self.token = token
        self.expected = expected
        super().__init__(f"Malformed token {token!r}, expected {expected}", descriptor)


class MalformedQuantity(ExtractionError, ValueError):
    """A numeric or metre quantity is present but cannot be parsed."""

    def __init__(self, text: object, descriptor: str | None = None, field: str | None = None):
        self.text = text
        self.field = field
        where = f" in '{field}'" if field else ""
        super().__init__(f"Malformed quantity {text!r}{where}", descriptor)


class UnresolvedReference(ExtractionError):
    """A reference points at an id absent from the supplied index."""

    def __init__(self, reference: str | None, index: str, descriptor: str | None = None):
        self.reference = reference
        self.index = index
        super().__init__(f"Unresolved {index} reference {reference!r}", descriptor)
