"""Exceptions raised by the recommendation and experimentation core."""


class RoroError(Exception):
    """Base class for engine errors."""


class ExperimentConfigError(RoroError, ValueError):
    """An experiment request cannot be served (e.g. fewer than two variants)."""


class StorageError(RoroError, RuntimeError):
    """A storage backend failed to read or write."""
