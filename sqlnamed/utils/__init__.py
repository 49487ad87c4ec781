"""Utility functions and classes for sqlnamed."""
