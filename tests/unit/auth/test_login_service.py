"""
Tests unitaires LoginService

Vérifie: throttle avant mot de passe, identifiants invalides, compte banni,
émission du couple de tokens.
"""

from datetime import timedelta

import pytest

from studyhub_access.auth.interfaces import AuthFailure
from studyhub_access.auth.login_service import LoginService
from studyhub_access.core import RateLimitKeys
from studyhub_access.quota import FixedWindowRateLimiter, LoginThrottle


@pytest.fixture
def throttle(store, clock, logger):
    return LoginThrottle(FixedWindowRateLimiter(store, clock), logger=logger)


@pytest.fixture
def login_service(throttle, directory, session_manager, logger):
    return LoginService(throttle, directory, session_manager, logger=logger)


class TestLogin:
    """Connexion nominale et refus."""

    @pytest.mark.asyncio
    async def test_successful_login(self, login_service, session_manager):
        result = await login_service.login("alice", "correct-horse", client_ip="10.0.0.8")

        assert result.success is True
        assert result.subject.subject_id == 1
        assert result.tokens.expires_in == 3600
        assert (await session_manager.validate(result.tokens.access_token)).success is True

    @pytest.mark.asyncio
    async def test_wrong_password(self, login_service):
        result = await login_service.login("alice", "wrong", client_ip="10.0.0.8")

        assert result.failure == AuthFailure.INVALID_CREDENTIALS
        assert result.tokens is None

    @pytest.mark.asyncio
    async def test_unknown_user_same_failure(self, login_service):
        """Utilisateur inconnu: même refus qu'un mauvais mot de passe."""
        result = await login_service.login("mallory", "whatever", client_ip="10.0.0.8")

        assert result.failure == AuthFailure.INVALID_CREDENTIALS

    @pytest.mark.asyncio
    async def test_banned_user(self, login_service, directory):
        directory.ban(1, "plagiarism")

        result = await login_service.login("alice", "correct-horse", client_ip="10.0.0.8")

        assert result.failure == AuthFailure.SUBJECT_DISABLED
        assert result.reason == "plagiarism"


class TestLoginThrottled:
    """Au-delà de la limite, même un mot de passe correct est refusé."""

    @pytest.mark.asyncio
    async def test_sixth_attempt_refused_with_correct_password(self, login_service, clock):
        for _ in range(5):
            await login_service.login("alice", "wrong", client_ip="10.0.0.8")

        result = await login_service.login("alice", "correct-horse", client_ip="10.0.0.9")

        assert result.failure == AuthFailure.LIMIT_EXCEEDED
        assert result.retry_at == clock.now() + timedelta(minutes=15)

    @pytest.mark.asyncio
    async def test_login_allowed_after_window(self, login_service, clock):
        for _ in range(6):
            await login_service.login("alice", "wrong", client_ip="10.0.0.8")
        clock.advance(timedelta(minutes=15))

        result = await login_service.login("alice", "correct-horse", client_ip="10.0.0.8")

        assert result.success is True

    @pytest.mark.asyncio
    async def test_successful_attempts_count_too(self, login_service, store):
        await login_service.login("alice", "correct-horse", client_ip="10.0.0.8")

        keys = RateLimitKeys()
        assert await store.get(keys.login_user("alice")) == "1"
        assert await store.get(keys.login_ip("10.0.0.8")) == "1"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("username", ["", "   "])
    async def test_blank_username_refused_and_counted(self, login_service, store, username):
        """Nom vide: refus ordinaire, sans appel à l'annuaire."""
        result = await login_service.login(username, "correct-horse", client_ip="10.0.0.8")

        assert result.failure == AuthFailure.INVALID_CREDENTIALS
        assert await store.get(RateLimitKeys().login_ip("10.0.0.8")) == "1"

    @pytest.mark.asyncio
    async def test_blank_client_ip(self, login_service):
        result = await login_service.login("alice", "correct-horse", client_ip="")

        assert result.success is True
