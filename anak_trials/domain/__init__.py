"""Domain layer for anak-trials.

This module contains the storage port, checkpoint and export models, and the
formatting and anonymization services. No infrastructure dependencies.
"""

from .models import CHECKPOINT_FIELDS, AnonymizedTrialRecord, CheckpointUpdate

__all__ = [
    "CHECKPOINT_FIELDS",
    "AnonymizedTrialRecord",
    "CheckpointUpdate",
]
