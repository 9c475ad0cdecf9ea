"""Release Periodics controller - triggers release-bound periodic jobs."""

__version__ = "1.0.0"
