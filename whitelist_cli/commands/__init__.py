"""
CLI Commands Package

Contains implementations for each CLI subcommand.
"""

from . import build, verify

__all__ = ["build", "verify"]
