"""
STUDYHUB Access Core - Review Interfaces

Machine à états de modération d'une ressource déposée.

    pending ──decide──> approved | rejected
    rejected ──submit (déposant)──> pending
    * ──delete (admin)──> deleted (terminal)
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from ..core.interfaces import Role


class ReviewStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    DELETED = "deleted"


class ReviewFailure(Enum):
    """Violations de préconditions du workflow (erreurs client, sans retry)."""

    NOT_FOUND = "not_found"
    ACCESS_DENIED = "access_denied"
    ALREADY_APPROVED = "already_approved"
    ALREADY_REVIEWED = "already_reviewed"
    MISSING_REASON = "missing_reason"
    INVALID_OUTCOME = "invalid_outcome"
    INVALID_STATE = "invalid_state"
    CONFLICT = "conflict"


@dataclass(frozen=True)
class Actor:
    """Utilisateur qui agit sur une ressource."""

    user_id: int
    role: Role

    @property
    def is_privileged(self) -> bool:
        return self.role == Role.ADMIN


@dataclass(frozen=True)
class ReviewableResource:
    """
    Ressource déposée, réduite aux champs du workflow.

    Attributes:
        resource_id: Identifiant ressource
        uploader_id: Déposant
        status: État de modération
        reviewer_id: Modérateur ayant statué
        reviewed_at: Date de décision
        rejection_reason: Motif, présent si et seulement si rejected
    """

    resource_id: int
    uploader_id: int
    status: ReviewStatus = ReviewStatus.PENDING
    reviewer_id: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None

    def __post_init__(self):
        if self.status == ReviewStatus.REJECTED and not (self.rejection_reason or "").strip():
            raise ValueError("rejected resource requires a rejection_reason")


@dataclass(frozen=True)
class ReviewResult:
    """Résultat d'une transition du workflow."""

    success: bool
    resource: Optional[ReviewableResource] = None
    failure: Optional[ReviewFailure] = None

    @classmethod
    def fail(cls, failure: ReviewFailure, resource: Optional[ReviewableResource] = None) -> "ReviewResult":
        return cls(success=False, resource=resource, failure=failure)


class IReviewRepository(ABC):
    """
    Persistance des ressources (base relationnelle externe).

    compare_and_set doit être atomique: l'écriture n'a lieu que si le
    statut stocké est encore ``expected`` au moment de l'écriture
    (UPDATE ... WHERE status = :expected).
    """

    @abstractmethod
    async def get(self, resource_id: int) -> Optional[ReviewableResource]:
        pass

    @abstractmethod
    async def compare_and_set(self, expected: ReviewStatus, updated: ReviewableResource) -> bool:
        """
        Returns:
            True si l'écriture a eu lieu
        """
        pass
