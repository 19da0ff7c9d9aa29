"""FastAPI dependency injection — session registry and artifact client."""

from __future__ import annotations

from functools import lru_cache

from scene_director.memory.sessions import SessionRegistry
from scene_director.tools.artifact_client import ArtifactClient
from scene_director.tools.gemini import GeminiArtifactClient


@lru_cache(maxsize=1)
def get_sessions() -> SessionRegistry:
    """Return the process-wide session registry."""
    return SessionRegistry()


@lru_cache(maxsize=1)
def get_artifact_client() -> ArtifactClient:
    """Return a singleton Gemini-backed artifact client."""
    return GeminiArtifactClient()
