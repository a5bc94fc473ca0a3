"""EduProgress: exam scoring, activity ledger and achievements."""

__version__ = "0.1.0"
