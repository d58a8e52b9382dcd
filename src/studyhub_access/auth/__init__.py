"""
Authentification: tokens, liste de révocation, sessions, connexion.
"""

from .interfaces import (
    ITokenCodec,
    IRevocationStore,
    ISessionManager,
    TokenType,
    TokenError,
    AuthFailure,
    TokenClaims,
    IssuedToken,
    TokenPair,
    TokenVerification,
    AuthResult,
)
from .token_codec import TokenCodec
from .revocation_store import RevocationStore
from .session_manager import SessionManager
from .login_service import LoginService

__all__ = [
    # Interfaces
    "ITokenCodec",
    "IRevocationStore",
    "ISessionManager",
    # Data classes
    "TokenType",
    "TokenError",
    "AuthFailure",
    "TokenClaims",
    "IssuedToken",
    "TokenPair",
    "TokenVerification",
    "AuthResult",
    # Implementations
    "TokenCodec",
    "RevocationStore",
    "SessionManager",
    "LoginService",
]
