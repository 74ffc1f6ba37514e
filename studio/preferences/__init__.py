"""User preferences and personal data management."""
