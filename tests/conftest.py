"""
STUDYHUB Access Core - Pytest Configuration
Fixtures partagées pour tous les tests.
"""

from dataclasses import replace
from datetime import timedelta
from pathlib import Path
from typing import Dict, Optional, Tuple

import pytest

from studyhub_access.auth import RevocationStore, SessionManager, TokenCodec
from studyhub_access.core import (
    IUserDirectory,
    ManualClock,
    Role,
    SubjectRecord,
    SubjectStatus,
)
from studyhub_access.logging import StructuredLogger
from studyhub_access.store import MemoryKeyStore


TEST_SECRET = "test-secret-0123456789abcdef0123456789abcdef"


class FakeUserDirectory(IUserDirectory):
    """Annuaire en mémoire (mots de passe en clair, tests uniquement)."""

    def __init__(self) -> None:
        self._by_id: Dict[int, SubjectRecord] = {}
        self._passwords: Dict[str, Tuple[str, int]] = {}
        self.lookups = 0

    def add(self, subject_id: int, username: str, password: str, role: Role = Role.STUDENT) -> SubjectRecord:
        record = SubjectRecord(subject_id=subject_id, username=username, role=role)
        self._by_id[subject_id] = record
        self._passwords[username] = (password, subject_id)
        return record

    def ban(self, subject_id: int, reason: Optional[str] = None) -> None:
        self._by_id[subject_id] = replace(
            self._by_id[subject_id], status=SubjectStatus.BANNED, ban_reason=reason
        )

    def change_role(self, subject_id: int, role: Role) -> None:
        self._by_id[subject_id] = replace(self._by_id[subject_id], role=role)

    async def get_subject(self, subject_id: int) -> Optional[SubjectRecord]:
        self.lookups += 1
        return self._by_id.get(subject_id)

    async def authenticate(self, username: str, password: str) -> Optional[SubjectRecord]:
        entry = self._passwords.get(username)
        if entry is None or entry[0] != password:
            return None
        return self._by_id[entry[1]]


@pytest.fixture
def fixtures_path() -> Path:
    """Chemin vers le dossier fixtures."""
    return Path(__file__).parent.parent / "fixtures"


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def store(clock: ManualClock) -> MemoryKeyStore:
    return MemoryKeyStore(clock)


@pytest.fixture
def logger() -> StructuredLogger:
    return StructuredLogger("test")


@pytest.fixture
def directory() -> FakeUserDirectory:
    directory = FakeUserDirectory()
    directory.add(1, "alice", "correct-horse", Role.STUDENT)
    directory.add(2, "bob", "battery-staple", Role.COMMITTEE)
    directory.add(3, "root", "admin-pass", Role.ADMIN)
    return directory


@pytest.fixture
def codec(clock: ManualClock) -> TokenCodec:
    return TokenCodec.with_secret(TEST_SECRET, clock=clock)


@pytest.fixture
def revocations(store: MemoryKeyStore) -> RevocationStore:
    return RevocationStore(store)


@pytest.fixture
def session_manager(
    codec: TokenCodec,
    revocations: RevocationStore,
    directory: FakeUserDirectory,
    clock: ManualClock,
    logger: StructuredLogger,
) -> SessionManager:
    return SessionManager(
        codec,
        revocations,
        directory,
        access_ttl=timedelta(hours=1),
        refresh_ttl=timedelta(hours=24),
        clock=clock,
        logger=logger,
    )
