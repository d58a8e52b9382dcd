"""
Workflow de modération des ressources déposées.
"""

from .interfaces import (
    Actor,
    IReviewRepository,
    ReviewableResource,
    ReviewFailure,
    ReviewResult,
    ReviewStatus,
)
from .memory_repository import MemoryReviewRepository
from .workflow import ReviewWorkflow

__all__ = [
    # Interfaces
    "IReviewRepository",
    # Data classes
    "Actor",
    "ReviewableResource",
    "ReviewFailure",
    "ReviewResult",
    "ReviewStatus",
    # Implementations
    "MemoryReviewRepository",
    "ReviewWorkflow",
]
