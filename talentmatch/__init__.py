"""Candidate and job matching engine with optional AI enhancement."""

__version__ = "0.1.0"
