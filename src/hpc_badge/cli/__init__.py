from .common import (
    emit_json,
    exit_with_message,
    finish,
    format_diagnostic,
    log_level_for,
)

from .handlers import (
    handle_badge,
    handle_clean,
    handle_draft,
    handle_paths,
    handle_report,
)

__all__ = [
    "emit_json",
    "exit_with_message",
    "finish",
    "format_diagnostic",
    "log_level_for",
    "handle_badge",
    "handle_clean",
    "handle_draft",
    "handle_paths",
    "handle_report",
]
