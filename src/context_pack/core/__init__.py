"""Core context assembly components for context-pack."""
