"""HTML canonicalization pipeline."""

from .pipeline import canonicalize_html

__all__ = ["canonicalize_html"]
