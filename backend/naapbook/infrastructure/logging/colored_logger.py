"""Colored store logger: ANSI-colored console logging for multi-step store work.

Used where one store call runs several distinct steps (legacy migration,
whole-document import) so each step is easy to trace in the terminal.

Color scheme:
    Cyan    : Whole-document import
    Yellow  : Legacy migration
    Blue    : Sequence repair
    Magenta : Cleanup
    Red     : Step failures
    Gray    : Details / stats
"""

import logging
import time
from contextlib import contextmanager
from typing import Any


# ── ANSI Color Codes ─────────────────────────────────────────────────

class _Colors:
    """ANSI escape codes for terminal colors."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    BLUE = "\033[94m"
    MAGENTA = "\033[95m"
    CYAN = "\033[96m"
    GRAY = "\033[90m"


# ── Store Step Definitions ───────────────────────────────────────────

class StoreStage:
    """Predefined store steps as (label, color) pairs."""

    MIGRATE = ("MIGRATE", _Colors.YELLOW)
    SEQUENCE = ("SEQUENCE", _Colors.BLUE)
    CLEANUP = ("CLEANUP", _Colors.MAGENTA)
    IMPORT = ("IMPORT", _Colors.CYAN)


# ── StoreLogger ──────────────────────────────────────────────────────

class StoreLogger:
    """Color-coded logger for multi-step store operations.

    Usage:
        slog = StoreLogger("LegacyClientMigrator")
        slog.step_start(StoreStage.MIGRATE, "Copying legacy clients", count=12)
        slog.detail("Skipped n-3 (already present)")
        slog.step_complete(StoreStage.MIGRATE, "Copied 11 clients")
    """

    def __init__(self, component_name: str):
        self._logger = logging.getLogger(f"naapbook.store.{component_name}")

    @staticmethod
    def _details(kwargs: dict[str, Any]) -> str:
        if not kwargs:
            return ""
        details = " | ".join(f"{k}={v}" for k, v in kwargs.items())
        return f" {_Colors.GRAY}({details}){_Colors.RESET}"

    def step_start(self, stage: tuple[str, str], message: str, **kwargs: Any) -> None:
        label, color = stage
        self._logger.info(
            f"{color}{_Colors.BOLD}[{label}]{_Colors.RESET} {color}{message}{_Colors.RESET}"
            + self._details(kwargs)
        )

    def step_complete(self, stage: tuple[str, str], message: str, **kwargs: Any) -> None:
        label, color = stage
        self._logger.info(
            f"{color}[{label}]{_Colors.RESET} {_Colors.GREEN}ok {message}{_Colors.RESET}"
            + self._details(kwargs)
        )

    def step_error(self, stage: tuple[str, str], message: str, error: Exception | None = None) -> None:
        label, _ = stage
        formatted = (
            f"{_Colors.RED}{_Colors.BOLD}[{label}]{_Colors.RESET} "
            f"{_Colors.RED}{message}{_Colors.RESET}"
        )
        if error:
            formatted += f" {_Colors.DIM}({type(error).__name__}: {error}){_Colors.RESET}"
        self._logger.warning(formatted)

    def detail(self, message: str, **kwargs: Any) -> None:
        self._logger.debug(f"   {_Colors.GRAY}|- {message}{_Colors.RESET}" + self._details(kwargs))

    @contextmanager
    def timed_step(self, stage: tuple[str, str], message: str, **kwargs: Any):
        """Log start/end of a step with elapsed time; failures are logged and re-raised."""
        self.step_start(stage, message, **kwargs)
        start = time.perf_counter()
        try:
            yield
        except Exception as e:
            elapsed = time.perf_counter() - start
            self.step_error(stage, f"{message} failed after {elapsed:.3f}s", error=e)
            raise
        else:
            elapsed = time.perf_counter() - start
            self.step_complete(stage, f"{message} ({elapsed:.3f}s)")
