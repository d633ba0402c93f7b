"""extraction/errors.py — typed failure of the text-extraction collaborators."""

from __future__ import annotations


class ExtractionError(RuntimeError):
    """Missing file, unsupported format, missing external tool or decoder failure."""
