"""Custom exceptions for tasklane."""


class TasklaneError(Exception):
    """Base exception for all tasklane errors."""

    pass


class ValidationError(TasklaneError):
    """Raised when validation fails."""

    pass


class MappingError(ValidationError):
    """Raised when a CSV column cannot be assigned to an application field."""

    pass


class CSVStructureError(TasklaneError):
    """Raised when a CSV import cannot proceed at all.

    Row-level problems never raise; they are recorded on the import result.
    """

    pass


class ParseError(TasklaneError):
    """Raised when a task file cannot be read or parsed."""

    pass
