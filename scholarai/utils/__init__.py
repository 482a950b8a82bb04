"""Utility functions."""

from scholarai.utils.text import extract_json_object, is_blank, strip_code_fences, truncate

__all__ = ["extract_json_object", "is_blank", "strip_code_fences", "truncate"]
