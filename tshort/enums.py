"""Shared enums for the t-short link service.

This module defines all status and state enums used across the codebase.
Using enums instead of string literals provides type safety and prevents typos.
"""

from enum import StrEnum

__all__ = ["AssignOutcome", "CacheStatus", "HealthStatus", "SubmitMethod"]


class HealthStatus(StrEnum):
    """Health check status values."""

    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    DISABLED = "disabled"


class AssignOutcome(StrEnum):
    """Result labels for identifier assignment metrics."""

    CREATED = "created"
    EXISTING = "existing"
    ERROR = "error"


class CacheStatus(StrEnum):
    HIT = "hit"
    MISS = "miss"


class SubmitMethod(StrEnum):
    """Value of the ``method`` form field sent by the HTML form.

    Anything else is treated as an API caller.
    """

    WEB = "web"
