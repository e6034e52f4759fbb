"""Collaborators that move files in and out of the staging tree."""

from envmerge.sync.collector import CollectResult, collect, collect_service
from envmerge.sync.remote import RemoteSync, RemoteTarget

__all__ = ["CollectResult", "RemoteSync", "RemoteTarget", "collect", "collect_service"]
