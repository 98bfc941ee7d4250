"""Justinianus case-analysis core: evidence graph scoring and deadline triage."""

__version__ = "0.3.0"
