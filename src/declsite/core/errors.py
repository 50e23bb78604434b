"""
Structured error types for declsite.

Every failure raised while walking or rendering a declaration graph is a
``DeclsiteError`` carrying a category, structured context (the FQN, the
handle and the page being rendered) and an optional chained cause.

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                      DeclsiteError                           │
        │            (category, context, cause)                        │
        ├─────────────────────────────────────────────────────────────┤
        │  GraphError (GRAPH)              ConfigError (CONFIG)         │
        │       │                               │                       │
        │  CorruptGraphError               MissingConfigError           │
        │  UnroutableDeclarationError      InvalidGraphDocumentError    │
        │  UnknownCategoryError                                         │
        │  MissingDeclarationError                                      │
        └─────────────────────────────────────────────────────────────┘

All graph errors are fatal: the run aborts on the first one. Dead
cross-reference links are not errors; they are recorded as
:class:`declsite.site.model.DeadLink` and rendered as inert anchors.

Examples:
    >>> error = CorruptGraphError("alias chain too long").with_context(fqn="std.mem")
    >>> error.context.fqn
    'std.mem'
    >>> error.to_dict()["category"]
    'GRAPH'

Tags:
    error-handling, exception-hierarchy, error-context, declsite
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Error categories used for classification and reporting."""

    GRAPH = "GRAPH"
    CONFIG = "CONFIG"
    ENGINE = "ENGINE"
    INTERNAL = "INTERNAL"


@dataclass
class ErrorContext:
    """Structured metadata attached to a :class:`DeclsiteError`.

    Attributes:
        fqn: Fully-qualified name of the declaration involved
        decl: Symbol index handle of the declaration involved
        page: Page path being rendered when the error occurred
        metadata: Additional key-value pairs
    """

    fqn: str | None = None
    decl: int | None = None
    page: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result: dict[str, Any] = {}
        for key in ["fqn", "decl", "page"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class DeclsiteError(Exception):
    """
    Base exception for all declsite errors.

    Subclasses set ``default_category`` so callers never pass a category
    by hand. Context can be attached after creation with
    :meth:`with_context`, and the original exception is kept as ``cause``.

    Examples:
        >>> error = DeclsiteError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> try:
        ...     raise KeyError("std")
        ... except KeyError as e:
        ...     error = DeclsiteError("lookup failed", cause=e)
        >>> error.cause
        KeyError('std')
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> DeclsiteError:
        """
        Add context to this error (fluent API).

        Usage:
            raise MissingDeclarationError("gone").with_context(fqn="std.fs")
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# GRAPH ERRORS (fatal, abort the run)
# =============================================================================


class GraphError(DeclsiteError):
    """The declaration graph is inconsistent with what the renderer needs."""

    default_category = ErrorCategory.GRAPH


class CorruptGraphError(GraphError):
    """Alias resolution or a lineage walk exceeded the depth bound."""

    def __init__(self, message: str, *, depth: int | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.depth = depth

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.depth is not None:
            result["depth"] = self.depth
        return result


class UnroutableDeclarationError(GraphError):
    """A declaration has no namespace or container ancestor to host it."""

    pass


class UnknownCategoryError(GraphError):
    """The symbol index reported a category outside the known set."""

    def __init__(self, value: Any, message: str | None = None, **kwargs: Any):
        self.value = value
        super().__init__(message or f"Unexpected category: {value!r}", **kwargs)


class MissingDeclarationError(GraphError):
    """A discovered page FQN could not be found again at render time."""

    def __init__(self, fqn: str, message: str | None = None, **kwargs: Any):
        self.fqn = fqn
        super().__init__(
            message or f"Error retrieving declaration: {fqn}",
            context=ErrorContext(fqn=fqn),
            **kwargs,
        )


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(DeclsiteError):
    """Configuration or input error. Must be fixed by the caller."""

    default_category = ErrorCategory.CONFIG


class MissingConfigError(ConfigError):
    """A required input (file, directory, setting) is missing."""

    def __init__(self, key: str, message: str | None = None):
        self.key = key
        super().__init__(message or f"Missing required input: {key}")


class InvalidGraphDocumentError(ConfigError):
    """A declaration-graph document could not be turned into an index."""

    pass


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "DeclsiteError",
    "GraphError",
    "CorruptGraphError",
    "UnroutableDeclarationError",
    "UnknownCategoryError",
    "MissingDeclarationError",
    "ConfigError",
    "MissingConfigError",
    "InvalidGraphDocumentError",
]
