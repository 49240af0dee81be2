"""Document canonicalization and footnote anchoring for classic texts."""

__version__ = "0.1.0"
