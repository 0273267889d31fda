"""
Remote API clients -- where the numbers come from and where they go.

Nexus: per-mod download metrics.
GitHub: the gist, Actions secrets and variables, the workflow switch.
"""

from .github import GitHubClient
from .http import create_session
from .nexus import NexusClient

__all__ = ["GitHubClient", "NexusClient", "create_session"]
