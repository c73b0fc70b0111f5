"""Background sweeps for order expiry and monitor liveness."""

from .service import Scheduler

__all__ = ["Scheduler"]
