"""Webhook receivers (GitHub, CI/CD, custom)."""
