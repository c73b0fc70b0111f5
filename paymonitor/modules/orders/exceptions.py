"""Order domain specific exceptions."""


class OrderError(Exception):
    """Base class for order related domain errors."""


class InvalidOrderTransitionError(OrderError):
    """Raised when a status change is not allowed from the current status."""


class InvalidAmountError(OrderError, ValueError):
    """Raised when a price string is not a positive amount in whole cents."""


class UnknownPaymentKindError(OrderError, ValueError):
    """Raised when a payment kind code is not a known network."""
