"""Failure taxonomy of a DQI analysis.

Every error aborts the whole analysis; no partial report is produced.
Malformed rows are not errors (they are dropped by the reader).
"""


class DQIError(Exception):
    """Base class for DQI analysis failures."""


class DatasetReadError(DQIError):
    """The file could not be read or decoded as UTF-8 text."""


class EmptyDatasetError(DQIError):
    """No parseable data rows were found."""

    def __init__(self, message: str = "No data found in file") -> None:
        super().__init__(message)


class HashComputationError(DQIError):
    """The audit content hash could not be computed."""
