"""Exceptions raised by the quotetype core."""


class QuoteTypeError(Exception):
    """Base class for quotetype errors."""


class DataUnavailable(QuoteTypeError):
    """No quote can be supplied for the requested length group."""

    def __init__(self, category: str, reason: str = "no quotes available") -> None:
        super().__init__(f"{category}: {reason}")
        self.category = category
        self.reason = reason
