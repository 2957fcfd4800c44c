"""pr-tracker: personal record and benchmark WOD tracker with an AI coach."""

__version__ = "0.1.0"
