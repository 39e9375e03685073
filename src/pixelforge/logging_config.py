"""
Logging configuration for pixelforge.

Everything logs under the ``pixelforge`` logger. A stderr handler is attached
only when set_verbosity or configure_logging runs (the CLI and UI entry
points do this), so applications embedding the library keep control of their
own logging.

What each verbosity level shows during a sprite generation:

- 0 (default): INFO. Session events (result added, deleted, reference set)
  and the generation line with style, type, reference flag and elapsed time.
- 1: as 0, plus the user's prompt and the full instruction text sent to the
  model (see log_prompt_text).
- 2: DEBUG. As 1, plus payload part counts, the Gemini endpoint, HTTP status
  and, with debug_api, the request/response bodies with image data truncated.

--quiet drops to WARNING (unreadable storage, corrupt history, duplicate ids,
failed history writes).
PIXELFORGE_VERBOSITY (0/1/2) is read by the CLI and UI; -v/-vv override it.
"""

import logging
import os

LOG_FORMAT = "%(levelname)s [%(name)s] %(message)s"
ROOT_LOGGER_NAME = "pixelforge"

# Instruction text is long; anything past this is cut in logs
PROMPT_LOG_MAX = 50_000

# verbosity -> (logger level, log prompt text)
_VERBOSITY_LEVELS: dict[int, tuple[int, bool]] = {
    0: (logging.INFO, False),
    1: (logging.INFO, True),
    2: (logging.DEBUG, True),
}

_log_prompts: bool = False
_configured: bool = False


def _ensure_handler() -> None:
    """Add a stderr handler to the pixelforge logger if not already present."""
    global _configured
    if _configured:
        return
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
    _configured = True


def set_verbosity(level: int) -> None:
    """Set logging verbosity; values below 0 act as 0 and above 2 as 2."""
    global _log_prompts
    _ensure_handler()
    log_level, _log_prompts = _VERBOSITY_LEVELS[max(0, min(level, 2))]
    logging.getLogger(ROOT_LOGGER_NAME).setLevel(log_level)


def log_prompts() -> bool:
    """Return True if prompt and instruction text is logged (verbosity 1 or 2)."""
    return _log_prompts


def configure_logging(verbose_level: int = 0, quiet: bool = False) -> None:
    """
    Configure logging for the CLI and UI.

    quiet wins over verbose_level: only warnings and errors are shown and
    prompt text is never logged.
    """
    global _log_prompts
    if not quiet:
        set_verbosity(verbose_level)
        return
    _ensure_handler()
    logging.getLogger(ROOT_LOGGER_NAME).setLevel(logging.WARNING)
    _log_prompts = False


def log_prompt_text(logger: logging.Logger, label: str, text: str) -> None:
    """Log a prompt or instruction text at INFO when prompt logging is on."""
    if not _log_prompts:
        return
    if len(text) > PROMPT_LOG_MAX:
        text = text[:PROMPT_LOG_MAX] + "..."
    logger.info("%s: %s", label, text)


def get_verbosity_from_env() -> int:
    """Read PIXELFORGE_VERBOSITY (0, 1 or 2); anything else means 0."""
    raw = os.environ.get("PIXELFORGE_VERBOSITY", "0").strip()
    return {"1": 1, "2": 2}.get(raw, 0)


def get_logger(name: str) -> logging.Logger:
    """Return a child logger under pixelforge (e.g. pixelforge.core.session)."""
    if name.startswith(ROOT_LOGGER_NAME + ".") or name == ROOT_LOGGER_NAME:
        return logging.getLogger(name)
    return logging.getLogger(ROOT_LOGGER_NAME + "." + name)


__all__ = [
    "configure_logging",
    "get_logger",
    "get_verbosity_from_env",
    "log_prompt_text",
    "log_prompts",
    "set_verbosity",
]
