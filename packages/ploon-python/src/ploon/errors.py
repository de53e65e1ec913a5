"""Errors raised by the PLOON codec."""


class PloonError(ValueError):
    """Base class for PLOON errors.

    Args:
        message: Human-readable description.
        fragment: The offending piece of input, if any.
    """

    def __init__(self, message: str, fragment: str | None = None) -> None:
        self.fragment = fragment
        if fragment is not None:
            message = f"{message}: {fragment!r}"
        super().__init__(message)


class EmptyInputError(PloonError):
    """Input text is None or blank."""


class MalformedSchemaError(PloonError):
    """Schema brackets are missing or nested groups are unbalanced."""


class MalformedRecordError(PloonError):
    """A record has no field delimiter.

    The decoder drops such records instead of raising; the class exists so
    callers can raise it from their own record checks.
    """


class InvalidPathError(PloonError):
    """A record path is neither ``depth`` nor ``depth:index`` (strict mode)."""


class SchemaInconsistencyError(PloonError):
    """A record's value count disagrees with the schema (strict mode)."""


class AmbiguousRootError(PloonError):
    """A root object has sibling keys next to its root array."""
