"""
Session Module

Interactive registration session tying loading, recentering, posing and
feedback together.
"""

from .session import RegistrationSession

__all__ = [
    "RegistrationSession",
]
