"""Merchant domain specific exceptions."""


class MerchantError(Exception):
    """Base class for merchant related domain errors."""


class UnknownMerchantError(MerchantError):
    """Raised when an external merchant identifier has no active mapping."""
