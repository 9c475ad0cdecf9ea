"""
External collaborators of the reconciler.

This package contains:
- Protocols for release, template, artifact, history and sink access
- File-backed release and template sources
- Redis and in-memory job stores
"""

from release_periodics.sources.files import (
    FileReleaseSource,
    FileTemplateSource,
    ReleaseMirrorStore,
)
from release_periodics.sources.redis_store import InMemoryJobStore, RedisJobStore

__all__ = [
    "FileReleaseSource",
    "FileTemplateSource",
    "ReleaseMirrorStore",
    "InMemoryJobStore",
    "RedisJobStore",
]
