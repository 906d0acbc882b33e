"""Mortgage payoff and HELOC acceleration calculations.

This module also exposes the package version for runtime display."""

from core.version import __version__
from heloc.presets import DISCLAIMER

__all__ = ["__version__", "DISCLAIMER"]
