"""Exception types raised by typed_columns."""


class TypedColumnsError(Exception):
    """Base class for all typed_columns errors."""


class DatasetException(TypedColumnsError):
    """Fatal environment or configuration error.

    Raised when the runtime cannot satisfy a schema, e.g. the concrete class
    for a fixed-layout record cannot be resolved. Callers are not expected to
    handle this per operation.
    """


class ValidationException(TypedColumnsError, ValueError):
    """Recoverable error caused by invalid caller input."""


class SchemaValidationException(ValidationException):
    """A schema, field name or field value does not satisfy the schema."""
