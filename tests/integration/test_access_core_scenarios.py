"""
Tests d'intégration Access Core

Scénarios de bout en bout sur le graphe assemblé par build_access_core,
avec cache et dépôts en mémoire.
"""

from datetime import timedelta

import pytest

from studyhub_access import build_access_core
from studyhub_access.auth import AuthFailure
from studyhub_access.core import Role, load_settings
from studyhub_access.quota import DownloadFailure, IDownloadSigner
from studyhub_access.review import (
    Actor,
    MemoryReviewRepository,
    ReviewableResource,
    ReviewFailure,
    ReviewStatus,
)
from studyhub_access.store import MemoryConfigStore


class StaticSigner(IDownloadSigner):
    async def sign(self, resource_id: int) -> str:
        return f"https://files.example/{resource_id}"


@pytest.fixture
def settings(fixtures_path):
    return load_settings(fixtures_path / "configs" / "access_core.yaml")


@pytest.fixture
def repository():
    return MemoryReviewRepository()


@pytest.fixture
def config_store():
    return MemoryConfigStore()


@pytest.fixture
def core(settings, directory, config_store, repository, store, clock, logger):
    return build_access_core(
        settings,
        directory,
        config_store,
        repository,
        StaticSigner(),
        store=store,
        clock=clock,
        logger=logger,
    )


class TestBuild:
    def test_requires_store_or_redis_url(self, settings, directory, config_store, repository):
        with pytest.raises(ValueError):
            build_access_core(settings, directory, config_store, repository, StaticSigner())

    def test_settings_applied(self, core):
        assert core.sessions.access_ttl == timedelta(hours=1)
        assert core.throttle.user_limit == 5
        assert core.download_quota.default_limit == 20


class TestSessionLifecycle:
    """Connexion, rotation, déconnexion."""

    @pytest.mark.asyncio
    async def test_login_refresh_logout(self, core):
        login = await core.login.login("alice", "correct-horse", client_ip="10.0.0.8")
        assert login.success is True

        rotated = await core.sessions.refresh(login.tokens.refresh_token)
        assert rotated.success is True
        assert (await core.sessions.refresh(login.tokens.refresh_token)).failure == AuthFailure.REVOKED

        access = rotated.tokens.access_token
        assert (await core.sessions.validate(access)).success is True
        await core.sessions.logout(access)
        assert (await core.sessions.validate(access)).failure == AuthFailure.REVOKED

    @pytest.mark.asyncio
    async def test_alice_throttled_then_recovers(self, core, clock):
        """5 mots de passe faux, le 6e essai correct est refusé; un jour plus tard, succès."""
        for _ in range(5):
            failed = await core.login.login("alice", "wrong", client_ip="10.0.0.8")
            assert failed.failure == AuthFailure.INVALID_CREDENTIALS

        blocked = await core.login.login("alice", "correct-horse", client_ip="10.0.0.8")
        assert blocked.failure == AuthFailure.LIMIT_EXCEEDED
        assert blocked.tokens is None

        clock.advance(timedelta(days=1))

        recovered = await core.login.login("alice", "correct-horse", client_ip="10.0.0.8")
        assert recovered.success is True

    @pytest.mark.asyncio
    async def test_banned_user_cannot_refresh(self, core, directory):
        login = await core.login.login("alice", "correct-horse", client_ip="10.0.0.8")
        directory.ban(1, "abuse")

        result = await core.sessions.refresh(login.tokens.refresh_token)

        assert result.failure == AuthFailure.SUBJECT_DISABLED
        assert result.reason == "abuse"


class TestReviewAndDownload:
    """Modération puis téléchargement sous quota."""

    @pytest.mark.asyncio
    async def test_committee_upload_admin_approval(self, core, repository):
        committee = Actor(user_id=2, role=Role.COMMITTEE)
        admin = Actor(user_id=3, role=Role.ADMIN)
        repository.add(ReviewableResource(resource_id=100, uploader_id=committee.user_id))

        edited = await core.review.submit(100, committee)
        assert edited.resource.status == ReviewStatus.PENDING

        approved = await core.review.decide(100, admin.user_id, ReviewStatus.APPROVED)
        assert approved.resource.status == ReviewStatus.APPROVED
        assert approved.resource.reviewer_id == admin.user_id

        assert (await core.review.submit(100, committee)).failure == ReviewFailure.ALREADY_APPROVED
        again = await core.review.decide(100, admin.user_id, ReviewStatus.REJECTED, "second look")
        assert again.failure == ReviewFailure.ALREADY_REVIEWED

    @pytest.mark.asyncio
    async def test_download_quota_on_approved_resource(self, core, repository, config_store):
        resource = repository.add(ReviewableResource(resource_id=200, uploader_id=2))
        config_store.update("download_daily_limit", "2")

        pending = await core.downloads.grant(resource, user_id=1)
        assert pending.failure == DownloadFailure.NOT_AVAILABLE

        approved = (await core.review.decide(200, 3, ReviewStatus.APPROVED)).resource
        results = [await core.downloads.grant(approved, user_id=1) for _ in range(3)]

        assert [r.success for r in results] == [True, True, False]
        assert results[0].url == "https://files.example/200"
        assert results[2].failure == DownloadFailure.LIMIT_EXCEEDED

        config_store.update("download_daily_limit", "0")
        assert (await core.downloads.grant(approved, user_id=1)).success is True
