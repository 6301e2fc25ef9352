class PlanytError(Exception):
    """Base class for errors raised by planyt."""


class InvalidInputError(PlanytError, ValueError):
    """Caller supplied input the operation cannot work with (e.g. no sample rows)."""


class EmbeddingError(PlanytError, RuntimeError):
    """The embedding backend failed or returned an unusable response."""


class ConfigurationError(PlanytError):
    """Required environment configuration is missing or invalid."""


class StoreError(PlanytError):
    """Reading or writing the local key-value store failed."""
