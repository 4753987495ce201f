"""Playwright module for INPI crawler."""

from .session import BrowserSession, PlaywrightSessionDriver, build_launch_args

__all__ = [
    "BrowserSession",
    "PlaywrightSessionDriver",
    "build_launch_args",
]
