"""
Advisory Module

Language-model commentary on the current alignment.
"""

from .advisor import (
    RegistrationAdvisor,
    AdvisoryLine,
    build_prompt,
    format_advisory,
    FALLBACK_MESSAGE,
)

__all__ = [
    "RegistrationAdvisor",
    "AdvisoryLine",
    "build_prompt",
    "format_advisory",
    "FALLBACK_MESSAGE",
]
