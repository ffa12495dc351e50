"""Centralized error handler for drizzleaudit commands."""

import traceback
from collections.abc import Callable
from datetime import datetime
from functools import wraps
from typing import Any

import click

from drizzleaudit.utils.logging import logger

from .constants import ERROR_LOG_FILE, STATE_DIR


def handle_exceptions(func: Callable[..., Any]) -> Callable[..., Any]:
    """Decorator that logs unexpected failures and surfaces them as ClickException."""

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except (click.ClickException, click.exceptions.Exit, click.Abort):
            raise
        except Exception as e:
            error_type = type(e).__name__
            error_msg = str(e)
            tb = traceback.format_exc()

            logger.opt(exception=True).error(
                "Command '{cmd}' failed: {err}",
                cmd=func.__name__,
                err=error_msg,
            )

            error_log_path = ERROR_LOG_FILE
            try:
                STATE_DIR.mkdir(parents=True, exist_ok=True)
                with open(error_log_path, "a", encoding="utf-8") as f:
                    f.write("\n" + "=" * 80 + "\n")
                    f.write(f"[{datetime.now().isoformat()}] Error in command: {func.__name__}\n")
                    f.write("=" * 80 + "\n")
                    f.write(f"{error_type}: {error_msg}\n\n")
                    f.write(tb)
                    f.write("=" * 80 + "\n\n")
            except OSError as log_error:
                logger.warning("Could not write {path}: {err}", path=error_log_path, err=log_error)

            user_message = (
                f"{error_type}: {error_msg}\n\n"
                f"Full traceback logged to: {error_log_path}"
            )

            raise click.ClickException(user_message) from e

    return wrapper
