"""
STUDYHUB Access Core - Structured Logger

Logger JSON structuré utilisé par tous les composants du coeur d'accès.
"""

import threading
import uuid
from collections import deque
from datetime import datetime, timezone
from typing import Any, Callable, Deque, Dict, List, Optional

from .interfaces import (
    IStructuredLogger,
    ISensitiveMasker,
    LogConfig,
    LogEntry,
    LogLevel,
    correlation_id_var,
)
from .sensitive_masker import SensitiveMasker


class MissingRequiredFieldError(Exception):
    """Champ obligatoire manquant."""

    def __init__(self, field_name: str) -> None:
        self.field_name = field_name
        super().__init__(f"Required field missing: {field_name}")


class StructuredLogger(IStructuredLogger):
    """
    Logger JSON structuré.

    Résolution du correlation_id: argument explicite, sinon ContextVar de la
    requête courante, sinon UUID généré.

    Example:
        logger = StructuredLogger("session-manager")
        logger.warn("Refresh token replay", subject_id=42)
    """

    def __init__(
        self,
        component: str,
        config: Optional[LogConfig] = None,
        masker: Optional[ISensitiveMasker] = None,
        output_handler: Optional[Callable[[str], None]] = None,
    ) -> None:
        """
        Args:
            component: Nom du composant émetteur
            config: Configuration optionnelle
            masker: Masker pour données sensibles
            output_handler: Reçoit chaque ligne JSON (stdout, fichier, collecteur)

        Raises:
            ValueError: Si component vide
        """
        if not component or not component.strip():
            raise ValueError("Logger component cannot be empty")

        self._component = component.strip()
        self._config = config or LogConfig()
        self._masker = masker or SensitiveMasker()
        self._output_handler = output_handler
        self._entries: Deque[LogEntry] = deque(maxlen=self._config.max_entries)
        self._lock = threading.Lock()

    @property
    def component(self) -> str:
        return self._component

    def log(
        self,
        level: LogLevel,
        message: str,
        correlation_id: Optional[str] = None,
        **extra: Any,
    ) -> Optional[LogEntry]:
        if LogLevel.get_priority(level) < LogLevel.get_priority(self._config.min_level):
            return None

        if not message:
            raise MissingRequiredFieldError("message")

        resolved_correlation = correlation_id or correlation_id_var.get() or str(uuid.uuid4())

        masked_extra: Dict[str, Any] = {}
        if extra and self._config.include_extra:
            if self._config.mask_sensitive:
                masked_extra = self._masker.mask(dict(extra))
            else:
                masked_extra = dict(extra)

        entry = LogEntry(
            timestamp=self._generate_timestamp(),
            level=level,
            correlation_id=resolved_correlation,
            component=self._component,
            message=message,
            extra=masked_extra,
        )

        with self._lock:
            self._entries.append(entry)

        if self._output_handler:
            self._output_handler(entry.to_json())

        return entry

    @staticmethod
    def _generate_timestamp() -> str:
        """Timestamp ISO 8601 UTC avec millisecondes (2025-03-03T08:00:00.123Z)."""
        now = datetime.now(timezone.utc)
        return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"

    def debug(self, message: str, **extra: Any) -> Optional[LogEntry]:
        return self.log(LogLevel.DEBUG, message, **extra)

    def info(self, message: str, **extra: Any) -> Optional[LogEntry]:
        return self.log(LogLevel.INFO, message, **extra)

    def warn(self, message: str, **extra: Any) -> Optional[LogEntry]:
        return self.log(LogLevel.WARN, message, **extra)

    def error(self, message: str, **extra: Any) -> Optional[LogEntry]:
        return self.log(LogLevel.ERROR, message, **extra)

    def critical(self, message: str, **extra: Any) -> Optional[LogEntry]:
        return self.log(LogLevel.CRITICAL, message, **extra)

    def get_entries(self) -> List[LogEntry]:
        with self._lock:
            return list(self._entries)

    def get_entries_by_level(self, level: LogLevel) -> List[LogEntry]:
        return [e for e in self.get_entries() if e.level == level]

    def clear_entries(self) -> None:
        with self._lock:
            self._entries.clear()
