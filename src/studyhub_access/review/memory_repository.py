"""
STUDYHUB Access Core - Memory Review Repository

Dépôt en mémoire avec compare-and-set sur le statut (tests, développement).
"""

import threading
from typing import Dict, Optional

from .interfaces import IReviewRepository, ReviewableResource, ReviewStatus


class MemoryReviewRepository(IReviewRepository):
    """Dépôt thread-safe indexé par resource_id."""

    def __init__(self):
        self._lock = threading.Lock()
        self._resources: Dict[int, ReviewableResource] = {}

    def add(self, resource: ReviewableResource) -> ReviewableResource:
        """Enregistre une nouvelle ressource (dépôt initial)."""
        with self._lock:
            if resource.resource_id in self._resources:
                raise ValueError(f"Resource {resource.resource_id} already exists")
            self._resources[resource.resource_id] = resource
        return resource

    async def get(self, resource_id: int) -> Optional[ReviewableResource]:
        with self._lock:
            return self._resources.get(resource_id)

    async def compare_and_set(self, expected: ReviewStatus, updated: ReviewableResource) -> bool:
        with self._lock:
            current = self._resources.get(updated.resource_id)
            if current is None or current.status != expected:
                return False
            self._resources[updated.resource_id] = updated
            return True
