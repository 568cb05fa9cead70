"""Validators run over a completed document graph."""

from .links import LinkValidator, anchor_exists
from .orphans import OrphanDetector, find_orphans

__all__ = ["LinkValidator", "OrphanDetector", "anchor_exists", "find_orphans"]
