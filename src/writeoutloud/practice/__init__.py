"""Practice progress tracking."""
