"""Exception taxonomy for the grocery spend tracker."""


class GroceryTrackerError(Exception):
    """Base exception for the tracker."""


class ConfigError(GroceryTrackerError):
    """Configuration-related errors."""


# ---------------- Receipt ingestion ----------------


class ReceiptParseError(GroceryTrackerError):
    """A provider payload could not be turned into a canonical receipt."""


class MissingFieldsError(ReceiptParseError):
    """A hard-required upstream field (total, date) is absent."""

    def __init__(self, missing):
        self.missing = list(missing)
        super().__init__(
            "Missing required fields: total and date are required "
            f"(missing: {', '.join(self.missing)})"
        )


class InvalidDateError(ReceiptParseError):
    """The payload date could not be parsed."""

    def __init__(self, value):
        self.value = value
        super().__init__(f"Invalid date format: {value}")


# ---------------- Categorization ----------------


class ParseError(GroceryTrackerError):
    """The external predictor's response is malformed or invalid."""


class PredictorError(GroceryTrackerError):
    """The external predictor could not produce a response."""


class PredictorUnavailableError(PredictorError):
    """Predictor is not configured (e.g. no API key); never retried."""


# Retryable errors
class RetryableError(GroceryTrackerError):
    """Base class for errors that should trigger retry."""


class RetryablePredictorError(RetryableError, PredictorError):
    """Transient predictor failure (network, rate limit, 5xx)."""
