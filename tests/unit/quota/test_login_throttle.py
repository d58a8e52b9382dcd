"""
Tests unitaires LoginThrottle

Vérifie: double dimension IP/utilisateur, fin de fenêtre la plus tardive,
aucune indication de la dimension déclenchée.
"""

from datetime import timedelta

import pytest

from studyhub_access.core import AccessCoreSettings
from studyhub_access.logging import LogLevel
from studyhub_access.quota import FixedWindowRateLimiter, LoginThrottle


@pytest.fixture
def limiter(store, clock):
    return FixedWindowRateLimiter(store, clock)


@pytest.fixture
def throttle(limiter, logger):
    return LoginThrottle(limiter, logger=logger)


class TestThrottleDefaults:
    def test_default_limits(self, throttle):
        assert throttle.ip_limit == 20
        assert throttle.ip_window == timedelta(hours=1)
        assert throttle.user_limit == 5
        assert throttle.user_window == timedelta(minutes=15)

    def test_from_settings(self, limiter):
        settings = AccessCoreSettings(
            jwt_secret="s" * 32,
            login_ip_limit=50,
            login_user_limit=3,
            login_user_window_seconds=600,
        )

        throttle = LoginThrottle.from_settings(settings, limiter)

        assert throttle.ip_limit == 50
        assert throttle.user_limit == 3
        assert throttle.user_window == timedelta(minutes=10)


class TestUserDimension:
    @pytest.mark.asyncio
    async def test_sixth_attempt_refused(self, throttle, clock):
        for _ in range(5):
            assert (await throttle.check("10.0.0.1", "alice")).allowed is True

        decision = await throttle.check("10.0.0.2", "alice")

        assert decision.allowed is False
        assert decision.remaining == 0
        assert decision.reset_at == clock.now() + timedelta(minutes=15)

    @pytest.mark.asyncio
    async def test_username_case_insensitive(self, throttle):
        for name in ("alice", "Alice", "ALICE", " alice ", "aLiCe"):
            await throttle.check("10.0.0.1", name)

        assert (await throttle.check("10.0.0.1", "alice")).allowed is False

    @pytest.mark.asyncio
    async def test_other_user_unaffected(self, throttle):
        for _ in range(6):
            await throttle.check("10.0.0.1", "alice")

        assert (await throttle.check("10.0.0.1", "bob")).allowed is True


class TestIpDimension:
    @pytest.mark.asyncio
    async def test_ip_limit_across_usernames(self, throttle):
        for i in range(20):
            assert (await throttle.check("10.0.0.1", f"user{i}")).allowed is True

        assert (await throttle.check("10.0.0.1", "fresh-user")).allowed is False

    @pytest.mark.asyncio
    async def test_allowed_decision_reports_tightest(self, throttle):
        await throttle.check("10.0.0.1", "alice")

        decision = await throttle.check("10.0.0.1", "alice")

        assert decision.allowed is True
        assert decision.remaining == 3


class TestRefusalCombination:
    @pytest.mark.asyncio
    async def test_latest_reset_when_both_tripped(self, throttle, clock):
        """Les deux dimensions en refus: reset_at = fin la plus tardive."""
        start = clock.now()
        for i in range(15):
            await throttle.check("10.0.0.1", f"user{i}")
        for _ in range(6):
            await throttle.check("10.0.0.1", "alice")

        decision = await throttle.check("10.0.0.1", "alice")

        assert decision.allowed is False
        assert decision.reset_at == start + timedelta(hours=1)

    @pytest.mark.asyncio
    async def test_refusal_logged_with_dimensions(self, throttle, logger):
        for _ in range(6):
            await throttle.check("10.0.0.1", "alice")

        warnings = logger.get_entries_by_level(LogLevel.WARN)

        assert warnings[-1].extra["user_tripped"] is True
        assert warnings[-1].extra["ip_tripped"] is False
