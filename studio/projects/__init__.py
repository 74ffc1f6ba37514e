"""Projects and their versioned plans."""
