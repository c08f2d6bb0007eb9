"""
Core domain layer for kyc-match.

This package contains pure matching logic with no external dependencies.
Nothing here reads sessions, files or the network.
"""

from __future__ import annotations

__all__ = []
