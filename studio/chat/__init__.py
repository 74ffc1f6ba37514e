"""Conversations, messages and conversation export."""
