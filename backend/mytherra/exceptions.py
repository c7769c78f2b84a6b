"""Mytherra exceptions.

Every error carries the HTTP status code the API layer should answer with.
"""


class MytherraError(Exception):
    """Base Mytherra exception."""

    status_code: int = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(MytherraError):
    """Malformed or out-of-range input, tagged with the offending field."""

    status_code = 400

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field


class NotFoundError(MytherraError):
    """Unknown target or bet id."""

    status_code = 404


class InsufficientFavorError(MytherraError):
    """Stake or influence cost exceeds the spendable balance."""

    status_code = 402

    def __init__(self, message: str, required: int = 0, available: int = 0):
        super().__init__(message)
        self.required = required
        self.available = available


class ConfigMissingError(MytherraError):
    """No pricing config for a bet type, confidence or timeframe."""

    status_code = 500


class ConcurrencyError(MytherraError):
    """Lock contention timeout."""

    status_code = 423


class TickInProgressError(MytherraError):
    """A tick was requested while another one is still running."""

    status_code = 409
