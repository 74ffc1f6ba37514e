"""GitHub REST integration: browsing, analysis and repository export."""

from studio.github.client import GitHubClient, GitHubError

__all__ = ["GitHubClient", "GitHubError"]
