"""
STUDYHUB Access Core - Key Builders

Construction des clés du cache partagé. Chaque sous-système a son propre
espace de noms pour éviter toute collision entre révocations et compteurs.

Format: <prefix>:<domaine>:<segment>[:<segment>...]
Les segments fournis par l'appelant sont encodés (':' interdit en clair).
"""

from dataclasses import dataclass
from datetime import date
from urllib.parse import quote


def _segment(value: object) -> str:
    """Encode un segment de clé (aucun séparateur en clair)."""
    text = str(value)
    if not text:
        raise ValueError("Key segment cannot be empty")
    return quote(text, safe="")


@dataclass(frozen=True)
class KeyNamespace:
    """Espace de noms de clés sous un préfixe de déploiement."""

    prefix: str
    domain: str

    def __post_init__(self):
        if not self.prefix or not self.domain:
            raise ValueError("prefix and domain are required")
        if ":" in self.prefix or ":" in self.domain:
            raise ValueError("prefix and domain cannot contain ':'")

    def key(self, *parts: object) -> str:
        """Assemble une clé complète."""
        if not parts:
            raise ValueError("At least one key segment is required")
        return ":".join([self.prefix, self.domain, *(_segment(p) for p in parts)])


class SessionKeys:
    """Clés du domaine session (liste de révocation)."""

    def __init__(self, prefix: str = "studyhub"):
        self._ns = KeyNamespace(prefix, "auth")

    def revoked(self, token_id: str) -> str:
        return self._ns.key("revoked", token_id)


class RateLimitKeys:
    """Clés du domaine limitation de débit."""

    def __init__(self, prefix: str = "studyhub"):
        self._ns = KeyNamespace(prefix, "ratelimit")

    def login_ip(self, client_ip: str) -> str:
        return self._login("ip", (client_ip or "").strip())

    def login_user(self, username: str) -> str:
        # Insensible à la casse: "Alice" et "alice" partagent la même fenêtre
        return self._login("user", (username or "").strip().casefold())

    def _login(self, dimension: str, value: str) -> str:
        # Valeur vide: compteur dédié, hors de l'espace des valeurs encodées
        if not value:
            return self._ns.key("login", f"{dimension}-blank")
        return self._ns.key("login", dimension, value)

    def download(self, user_id: int, day: date) -> str:
        return self._ns.key("download", "user", user_id, day.isoformat())
