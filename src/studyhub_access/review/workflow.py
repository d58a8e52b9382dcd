"""
STUDYHUB Access Core - Review Workflow

Transitions de modération des ressources déposées.

Règles:
    - submit: admin depuis tout état (statut inchangé); déposant depuis
      pending/rejected uniquement, retour forcé à pending.
    - decide: uniquement depuis pending, une seule fois (compare-and-set).
    - delete: admin, depuis tout état, vers deleted (terminal).
    - Visibilité publique si et seulement si approved.
"""

from dataclasses import replace
from typing import Optional

from ..core.clock import SystemClock
from ..core.interfaces import IClock
from ..logging import IStructuredLogger, StructuredLogger
from .interfaces import (
    Actor,
    IReviewRepository,
    ReviewableResource,
    ReviewFailure,
    ReviewResult,
    ReviewStatus,
)


class ReviewWorkflow:
    """
    Machine à états de modération, indépendante du stockage.

    Example:
        workflow = ReviewWorkflow(repository)
        result = await workflow.decide(7, reviewer_id=1, outcome=ReviewStatus.APPROVED)
    """

    MAX_CAS_ATTEMPTS: int = 3
    EDITABLE_BY_UPLOADER = (ReviewStatus.PENDING, ReviewStatus.REJECTED)

    def __init__(
        self,
        repository: IReviewRepository,
        clock: Optional[IClock] = None,
        logger: Optional[IStructuredLogger] = None,
    ):
        self._repository = repository
        self._clock = clock or SystemClock()
        self._logger = logger or StructuredLogger("review-workflow")

    async def submit(self, resource_id: int, actor: Actor) -> ReviewResult:
        """
        Modification d'une ressource par son déposant ou un admin.

        Une modification non privilégiée renvoie la ressource en modération:
        statut pending, modérateur, date et motif effacés.
        """
        for _ in range(self.MAX_CAS_ATTEMPTS):
            current = await self._repository.get(resource_id)
            if current is None:
                return ReviewResult.fail(ReviewFailure.NOT_FOUND)

            if actor.is_privileged:
                return ReviewResult(success=True, resource=current)

            if actor.user_id != current.uploader_id:
                return ReviewResult.fail(ReviewFailure.ACCESS_DENIED, current)
            if current.status == ReviewStatus.APPROVED:
                return ReviewResult.fail(ReviewFailure.ALREADY_APPROVED, current)
            if current.status not in self.EDITABLE_BY_UPLOADER:
                return ReviewResult.fail(ReviewFailure.INVALID_STATE, current)

            updated = replace(
                current,
                status=ReviewStatus.PENDING,
                reviewer_id=None,
                reviewed_at=None,
                rejection_reason=None,
            )
            if await self._repository.compare_and_set(current.status, updated):
                return ReviewResult(success=True, resource=updated)

        self._logger.warn("Submit lost concurrent update", resource_id=resource_id)
        return ReviewResult.fail(ReviewFailure.CONFLICT)

    async def decide(
        self,
        resource_id: int,
        reviewer_id: int,
        outcome: ReviewStatus,
        rejection_reason: Optional[str] = None,
    ) -> ReviewResult:
        """
        Décision de modération, une seule fois par passage en pending.

        Returns:
            ReviewResult success, ou NOT_FOUND / INVALID_OUTCOME /
            ALREADY_REVIEWED / MISSING_REASON
        """
        if outcome not in (ReviewStatus.APPROVED, ReviewStatus.REJECTED):
            return ReviewResult.fail(ReviewFailure.INVALID_OUTCOME)

        current = await self._repository.get(resource_id)
        if current is None:
            return ReviewResult.fail(ReviewFailure.NOT_FOUND)
        if current.status != ReviewStatus.PENDING:
            return ReviewResult.fail(ReviewFailure.ALREADY_REVIEWED, current)

        reason = (rejection_reason or "").strip()
        if outcome == ReviewStatus.REJECTED and not reason:
            return ReviewResult.fail(ReviewFailure.MISSING_REASON, current)

        updated = replace(
            current,
            status=outcome,
            reviewer_id=reviewer_id,
            reviewed_at=self._clock.now(),
            rejection_reason=reason if outcome == ReviewStatus.REJECTED else None,
        )
        if not await self._repository.compare_and_set(ReviewStatus.PENDING, updated):
            # Un autre modérateur a statué entre la lecture et l'écriture
            self._logger.warn("Concurrent review decision lost", resource_id=resource_id, reviewer_id=reviewer_id)
            latest = await self._repository.get(resource_id)
            return ReviewResult.fail(ReviewFailure.ALREADY_REVIEWED, latest)

        self._logger.info(
            "Review decided",
            resource_id=resource_id,
            reviewer_id=reviewer_id,
            outcome=outcome.value,
        )
        return ReviewResult(success=True, resource=updated)

    async def delete(self, resource_id: int, actor: Actor) -> ReviewResult:
        """Suppression administrative, hors workflow de décision."""
        if not actor.is_privileged:
            return ReviewResult.fail(ReviewFailure.ACCESS_DENIED)

        for _ in range(self.MAX_CAS_ATTEMPTS):
            current = await self._repository.get(resource_id)
            if current is None:
                return ReviewResult.fail(ReviewFailure.NOT_FOUND)
            if current.status == ReviewStatus.DELETED:
                return ReviewResult(success=True, resource=current)

            updated = replace(current, status=ReviewStatus.DELETED, rejection_reason=None)
            if await self._repository.compare_and_set(current.status, updated):
                self._logger.info("Resource deleted", resource_id=resource_id, admin_id=actor.user_id)
                return ReviewResult(success=True, resource=updated)

        return ReviewResult.fail(ReviewFailure.CONFLICT)

    @staticmethod
    def is_visible(resource: ReviewableResource, viewer: Optional[Actor] = None) -> bool:
        """Public si approved; sinon déposant ou admin uniquement."""
        if resource.status == ReviewStatus.APPROVED:
            return True
        if viewer is None:
            return False
        return viewer.is_privileged or viewer.user_id == resource.uploader_id
