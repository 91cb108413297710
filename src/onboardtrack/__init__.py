"""Candidate onboarding tracking: interviews, checks, offers and cohorts."""

__version__ = "0.1.0"
