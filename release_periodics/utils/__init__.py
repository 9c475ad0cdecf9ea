"""Utility helpers for the Release Periodics controller."""
