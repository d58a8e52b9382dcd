"""
Logging structuré JSON avec masquage des secrets.
"""

from .interfaces import (
    IStructuredLogger,
    ISensitiveMasker,
    LogConfig,
    LogEntry,
    LogLevel,
    correlation_id_var,
)
from .sensitive_masker import SensitiveMasker
from .structured_logger import StructuredLogger, MissingRequiredFieldError

__all__ = [
    # Interfaces
    "IStructuredLogger",
    "ISensitiveMasker",
    # Data classes
    "LogConfig",
    "LogEntry",
    "LogLevel",
    "correlation_id_var",
    # Implementations
    "SensitiveMasker",
    "StructuredLogger",
    # Exceptions
    "MissingRequiredFieldError",
]
