"""AI fallback for slide text extraction."""
