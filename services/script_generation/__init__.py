"""LLM script generation for slide decks."""
