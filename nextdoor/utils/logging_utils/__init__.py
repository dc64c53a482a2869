"""
Category loggers with contextual fields.

    from nextdoor.utils.logging_utils import get_logger, log_context

    with log_context(community=community.slug):
        get_logger("forum").info("Post created id=%s", post.id)
"""

from .manager import (
    ContextAwareFormatter,
    LoggerManager,
    clear_log_context,
    env_level_overrides,
    get_log_context,
    get_logger,
    init_logger,
    log_context,
    logger_manager,
    update_log_context,
)

__all__ = [
    "ContextAwareFormatter",
    "LoggerManager",
    "clear_log_context",
    "env_level_overrides",
    "get_log_context",
    "get_logger",
    "init_logger",
    "log_context",
    "logger_manager",
    "update_log_context",
]
