"""
STUDYHUB Access Core - Memory Config Store

Table de configuration système en mémoire (tests, développement).
"""

import threading
from typing import Dict, Optional

from ..core.interfaces import IConfigStore


class MemoryConfigStore(IConfigStore):
    """Configuration système clé -> valeur texte, comme la table d'origine."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._lock = threading.Lock()
        self._values: Dict[str, str] = dict(initial or {})
        self._descriptions: Dict[str, str] = {}

    async def get_int(self, key: str) -> Optional[int]:
        with self._lock:
            raw = self._values.get(key)
        if raw is None:
            return None
        return int(raw.strip())

    async def set_default(self, key: str, value: int, description: str = "") -> None:
        with self._lock:
            if key not in self._values:
                self._values[key] = str(value)
                self._descriptions[key] = description

    def update(self, key: str, value: str) -> None:
        """Modification opérateur (prise en compte à la requête suivante)."""
        with self._lock:
            self._values[key] = value

    def describe(self, key: str) -> Optional[str]:
        return self._descriptions.get(key)
