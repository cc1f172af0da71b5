"""Core helpers shared between the CLI and the sync engine."""

from .async_utils import gather_limited, run_sync

__all__ = ["gather_limited", "run_sync"]
