"""File uploads and deterministic content analysis."""
