"""ContextVar-based rewrite configuration for Pespunte.

Provides thread-local configuration using Python's ContextVars (PEP 567).
Config is read by the event source and the driver at the start of each
``apply()`` call unless one is passed explicitly.

Thread Safety:
    ContextVars are thread-local by design. Each thread has independent storage,
    so no locks are needed and race conditions are impossible.

Usage:
    # Explicit config
    result = apply(source, rewrite, config=RewriteConfig(tables_enabled=True))

    # Or use the context manager
    with rewrite_config_context(RewriteConfig(unterminated=UnterminatedPolicy.FAIL)):
        result = apply(source, rewrite)

"""

from __future__ import annotations

from collections.abc import Callable
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Iterator

if TYPE_CHECKING:
    from markdown_it import MarkdownIt


class UnterminatedPolicy(Enum):
    """What to do when a start matcher fires and its stop matcher never does."""

    HAND_TO_CALLBACK = "hand_to_callback"  # rest of the document goes to the callback
    FAIL = "fail"  # raise UnterminatedRegionError


@dataclass(frozen=True, slots=True)
class RewriteConfig:
    """Immutable rewrite configuration.

    Frozen dataclass ensures thread-safety (immutable after creation).

    Attributes:
        tables_enabled: Enable GFM table parsing
        strikethrough_enabled: Enable ~~strikethrough~~ syntax
        unterminated: Policy for edit regions still open at end of document
        parser_factory: Build the markdown-it instance used as event source.
            Overrides the two parser toggles above when set.

    """

    tables_enabled: bool = False
    strikethrough_enabled: bool = False
    unterminated: UnterminatedPolicy = UnterminatedPolicy.HAND_TO_CALLBACK
    parser_factory: Callable[[], MarkdownIt] | None = None

    @classmethod
    def from_dict(cls, config_dict: dict) -> RewriteConfig:
        """Create RewriteConfig from dictionary.

        Only includes keys that are valid RewriteConfig fields; unknown keys
        are silently ignored. ``unterminated`` may be given as the policy's
        string value.

        Args:
            config_dict: Dictionary with config values. Keys should match
                RewriteConfig attribute names.

        Returns:
            New RewriteConfig instance with values from dict.

        Example:
            >>> config = RewriteConfig.from_dict({
            ...     "tables_enabled": True,
            ...     "unterminated": "fail",
            ...     "unknown_key": "ignored",
            ... })
            >>> config.unterminated
            <UnterminatedPolicy.FAIL: 'fail'>

        """
        valid_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in config_dict.items() if k in valid_fields}
        if isinstance(filtered.get("unterminated"), str):
            filtered["unterminated"] = UnterminatedPolicy(filtered["unterminated"])
        return cls(**filtered)


# Module-level default config (reused, never recreated)
_DEFAULT_CONFIG: RewriteConfig = RewriteConfig()

# Thread-local configuration via ContextVar
_rewrite_config: ContextVar[RewriteConfig] = ContextVar(
    "rewrite_config",
    default=_DEFAULT_CONFIG,
)


def get_rewrite_config() -> RewriteConfig:
    """Get current rewrite configuration (thread-local).

    Returns:
        The active RewriteConfig for this thread/context.

    """
    return _rewrite_config.get()


def set_rewrite_config(config: RewriteConfig) -> None:
    """Set rewrite configuration for current context.

    Args:
        config: RewriteConfig instance to use for this context.

    Thread Safety:
        Only affects the current thread's context. Other threads are unaffected.

    """
    _rewrite_config.set(config)


def reset_rewrite_config() -> None:
    """Reset to default configuration.

    Reuses the module-level _DEFAULT_CONFIG singleton, avoiding allocation.

    """
    _rewrite_config.set(_DEFAULT_CONFIG)


@contextmanager
def rewrite_config_context(config: RewriteConfig) -> Iterator[None]:
    """Context manager for temporary config changes.

    Useful for tests and isolated rewrites.

    Args:
        config: RewriteConfig to use within the context.

    Yields:
        None

    Example:
        >>> with rewrite_config_context(RewriteConfig(tables_enabled=True)):
        ...     doc = Document.parse("| a | b |\\n| - | - |\\n")
        >>> # Automatically reset to previous config

    Thread Safety:
        Only affects the current thread's context. Properly restores previous
        config even if an exception is raised.

    """
    previous = _rewrite_config.get()
    _rewrite_config.set(config)
    try:
        yield
    finally:
        _rewrite_config.set(previous)


__all__ = [
    "RewriteConfig",
    "UnterminatedPolicy",
    "get_rewrite_config",
    "set_rewrite_config",
    "reset_rewrite_config",
    "rewrite_config_context",
]
