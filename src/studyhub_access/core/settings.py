"""
STUDYHUB Access Core - Settings
Charge la configuration du coeur d'accès depuis un fichier YAML.
"""

from pathlib import Path
from typing import Any, Dict, Literal, Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from .interfaces import AccessCoreError


class ConfigIntegrityError(AccessCoreError):
    """Erreur d'intégrité de configuration."""

    pass


class AccessCoreSettings(BaseModel):
    """
    Configuration du coeur d'accès.

    Les durées sont en secondes. Le ratio par défaut access:refresh est 1:24.
    """

    # Signature des tokens
    jwt_algorithm: Literal["HS256", "ES384"] = "HS256"
    jwt_secret: Optional[str] = Field(default=None, min_length=32)
    jwt_private_key_path: Optional[str] = None
    jwt_issuer: str = "studyhub"

    access_token_ttl_seconds: int = Field(default=3600, gt=0)
    refresh_token_ttl_seconds: int = Field(default=86400, gt=0)

    # Cache partagé
    key_prefix: str = Field(default="studyhub", min_length=1, pattern=r"^[^:]+$")
    store_timeout_seconds: float = Field(default=2.0, gt=0, le=30)
    redis_url: Optional[str] = None

    # Limitation des connexions
    login_ip_limit: int = Field(default=20, ge=1)
    login_ip_window_seconds: int = Field(default=3600, gt=0)
    login_user_limit: int = Field(default=5, ge=1)
    login_user_window_seconds: int = Field(default=900, gt=0)

    # Quota de téléchargement (valeur initiale, la valeur vivante est en base)
    download_default_daily_limit: int = 20
    server_timezone: str = "Asia/Shanghai"

    @field_validator("server_timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {value}") from e
        return value

    @model_validator(mode="after")
    def _check_consistency(self) -> "AccessCoreSettings":
        if self.access_token_ttl_seconds >= self.refresh_token_ttl_seconds:
            raise ValueError("access_token_ttl_seconds must be lower than refresh_token_ttl_seconds")
        if self.jwt_algorithm == "HS256" and not self.jwt_secret:
            raise ValueError("jwt_secret is required for HS256")
        if self.jwt_algorithm == "ES384" and not self.jwt_private_key_path:
            raise ValueError("jwt_private_key_path is required for ES384")
        return self

    @property
    def timezone(self) -> ZoneInfo:
        return ZoneInfo(self.server_timezone)


def load_settings(path: Union[str, Path], overrides: Optional[Dict[str, Any]] = None) -> AccessCoreSettings:
    """
    Charge et valide un fichier de configuration YAML.

    Args:
        path: Chemin du fichier YAML
        overrides: Valeurs prioritaires (ex: secrets injectés par l'environnement)

    Returns:
        Configuration validée

    Raises:
        ConfigIntegrityError: Fichier absent, YAML invalide ou valeurs incohérentes
    """
    config_file = Path(path)
    if not config_file.exists():
        raise ConfigIntegrityError(f"Configuration non trouvée: {config_file}")

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigIntegrityError(f"Erreur de parsing YAML: {e}")

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigIntegrityError("Configuration doit être un objet YAML")

    # Section optionnelle "access_core:" pour partager un fichier global
    data = raw.get("access_core", raw)
    if not isinstance(data, dict):
        raise ConfigIntegrityError("access_core doit être un objet YAML")

    merged = {**data, **(overrides or {})}
    try:
        return AccessCoreSettings(**merged)
    except ValidationError as e:
        raise ConfigIntegrityError(f"Configuration invalide: {e}")
