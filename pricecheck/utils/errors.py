"""
Exception types raised by the price-check suite.

Recoverable interaction failures (``ElementNotInteractable`` and its
``StaleReference`` subclass) are retried inside the resilient interactor and
only escape as ``NoInteractableElementFound`` once every strategy is spent.
"""
from typing import Optional


class PriceCheckError(Exception):
    """Base class for suite errors."""


class ElementNotInteractable(PriceCheckError):
    """Element is hidden, disabled, covered by an overlay or not ready yet."""


class StaleReference(ElementNotInteractable):
    """Element handle is no longer attached to the page."""


class NoInteractableElementFound(PriceCheckError):
    """Every candidate strategy for an operation was tried and none succeeded."""

    def __init__(self, attempted: int, operation: str = "interaction", last_error: Optional[BaseException] = None):
        self.attempted = attempted
        self.operation = operation
        self.last_error = last_error
        detail = f" (last error: {last_error})" if last_error else ""
        super().__init__(f"No interactable element found for {operation} after {attempted} strategies{detail}")


class PriceNotFound(PriceCheckError):
    """No $-amount could be parsed out of the page text."""

    def __init__(self, where: str, text: Optional[str] = None):
        self.where = where
        self.text = text
        super().__init__(f"No price found on {where}: {text!r}")


class FixtureMalformed(PriceCheckError):
    """Test data document is missing, unreadable or has no 'tests' array."""


class FixtureIndexError(FixtureMalformed, IndexError):
    """Scenario position is outside the 'tests' array."""


class MissingCredentialsError(PriceCheckError):
    """Login credentials were not supplied through the environment."""


class InvalidTransition(PriceCheckError):
    """A journey step was attempted out of order."""


class AssertionMismatch(AssertionError):
    """Two values that must be identical differ; reported as a test failure."""

    def __init__(self, expected, actual, message: str = "Values differ"):
        self.expected = expected
        self.actual = actual
        self.message = message
        super().__init__(f"{message}: expected {expected!r} but was {actual!r}")
