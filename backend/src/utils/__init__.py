"""
Utility modules for the scheduling backend.

This package contains shared utility functions and helpers used across
the application, including datetime utilities and database query helpers.
"""

from utils.query_helpers import apply_scope

__all__ = ['apply_scope']
