"""GitHub access for repolens."""

from .client import GitHubClient

__all__ = ["GitHubClient"]
