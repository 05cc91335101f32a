"""Cross-cutting infrastructure (logging)."""

from chain_reaction.core.logging_config import (
    LogContext,
    configure_third_party_loggers,
    get_logger,
    setup_logging,
)

__all__ = [
    "LogContext",
    "configure_third_party_loggers",
    "get_logger",
    "setup_logging",
]
