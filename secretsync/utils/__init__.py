"""Utilities for SecretSync."""

from .clock import Clock, FixedClock, SystemClock
from .logging import setup_logging

__all__ = ["Clock", "FixedClock", "SystemClock", "setup_logging"]
