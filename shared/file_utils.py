"""
File and text processing utilities.
"""

import hashlib
from pathlib import PurePosixPath

PPTX_SUFFIX = ".pptx"


def generate_hash(text: str | bytes) -> str:
    """Generate MD5 hash for caching purposes."""
    data = text if isinstance(text, bytes) else text.encode()
    return hashlib.md5(data).hexdigest()


def sanitize_filename(filename: str) -> str:
    """Sanitize filename for safe storage."""
    invalid_chars = '<>:"/\\|?*'
    for char in invalid_chars:
        filename = filename.replace(char, "_")
    # Download names travel in a latin-1 header
    return "".join(char if char.isascii() and char.isprintable() else "_" for char in filename)


def is_pptx_filename(filename: str | None) -> bool:
    """Return True when the upload name carries the .pptx extension."""
    return bool(filename) and filename.lower().endswith(PPTX_SUFFIX)


def output_filename(filename: str | None, suffix: str) -> str:
    """Build the download name for a processed deck, e.g. ``talk_with_notes.pptx``."""
    stem = PurePosixPath(filename or "presentation").stem or "presentation"
    return sanitize_filename(f"{stem}_{suffix}{PPTX_SUFFIX}")


def validate_text_length(text: str, max_length: int = 10000) -> str:
    """Validate and truncate text if necessary."""
    if len(text) > max_length:
        return text[:max_length]
    return text


def truncate_with_ellipsis(text: str, max_length: int) -> str:
    """Cut ``text`` to ``max_length`` characters and mark the cut with ``...``."""
    if len(text) > max_length:
        return text[:max_length] + "..."
    return text


def file_extension(filename: str) -> str:
    """Lower-case extension without the dot (``audio1.WAV`` -> ``wav``)."""
    return PurePosixPath(filename).suffix.lstrip(".").lower()
