"""
Exceptions raised by the layout optimiser.

All of them derive from ``ValueError`` so callers that already guard input
parsing with ``except ValueError`` keep working.
"""

from __future__ import annotations


class LayoutError(ValueError):
    """Base class for invalid optimiser inputs."""


class InvalidGeometryError(LayoutError):
    """Dieline geometry cannot produce a usable slot configuration."""


class InvalidItemError(LayoutError):
    """A label item has an unusable quantity or identifier."""


class InvalidRequestError(LayoutError):
    """Request-level options (ink configuration, thresholds) are invalid."""
