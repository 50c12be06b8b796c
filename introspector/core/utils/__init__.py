"""Utility modules for the introspector core package.

This package contains shared utility functions used across the codebase.
"""

from .text import is_blank, join_label, name_from_key, parse_float, trim_text

__all__ = ["is_blank", "join_label", "name_from_key", "parse_float", "trim_text"]
