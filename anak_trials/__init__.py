"""anak-trials: pediatric patient and clinical trial tracking."""

__version__ = "1.0.0"
