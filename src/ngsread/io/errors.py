"""Input error taxonomy for the genotype and position loaders.

Every loader failure is fatal for the whole call. Errors carry the name of the
loader operation that raised them so the CLI can report where a dataset broke.
"""


class InputError(ValueError):
    """Base class for structural problems in an input file.

    Attributes:
        operation: Name of the loader operation that detected the problem.
        message: Human-readable cause.
    """

    def __init__(self, operation: str, message: str) -> None:
        self.operation = operation
        self.message = message
        super().__init__(f"{operation}: {message}")


class StreamOpenError(InputError):
    """Input file is missing or unreadable."""


class TruncatedInputError(InputError):
    """Input ended before the declared number of sites was read."""


class FormatError(InputError):
    """Row has too few fields, an invalid genotype code, or a bad position."""


class CorruptDataError(InputError):
    """NaN found after normalization."""


class InvalidDistanceError(InputError):
    """Non-positive distance between adjacent sites on one chromosome."""


class TrailingDataError(InputError):
    """Input holds more data than the declared number of sites."""
