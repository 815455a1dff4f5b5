"""Changesets release automation for GitLab CI."""

__version__ = "0.4.0"
