"""Learning progress: records, merging guest history, and progress ticks."""

from .models import ProgressEntry, ProgressRecord


__all__ = ["ProgressEntry", "ProgressRecord"]
