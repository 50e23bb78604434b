"""Core primitives shared by every declsite module: errors, logging, settings."""

from .errors import (
    ConfigError,
    CorruptGraphError,
    DeclsiteError,
    ErrorCategory,
    ErrorContext,
    GraphError,
    InvalidGraphDocumentError,
    MissingConfigError,
    MissingDeclarationError,
    UnknownCategoryError,
    UnroutableDeclarationError,
)
from .logging import LogContext, configure_logging, get_logger
from .settings import DeclsiteSettings, load_settings

__all__ = [
    "ConfigError",
    "CorruptGraphError",
    "DeclsiteError",
    "ErrorCategory",
    "ErrorContext",
    "GraphError",
    "InvalidGraphDocumentError",
    "MissingConfigError",
    "MissingDeclarationError",
    "UnknownCategoryError",
    "UnroutableDeclarationError",
    "LogContext",
    "configure_logging",
    "get_logger",
    "DeclsiteSettings",
    "load_settings",
]
