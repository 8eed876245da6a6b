import logging
import os
from typing import Optional


def configure_logging(default_level: int = logging.WARNING, log_file: Optional[str] = None) -> None:
    """Configure root logger with a sane default format.

    Respects SEEDCRAWL_LOG_LEVEL env var if present. ``log_file`` redirects
    records away from the terminal, which the curses frontend owns while running.
    """
    level_name = os.getenv("SEEDCRAWL_LOG_LEVEL")
    level = default_level
    if level_name:
        level = getattr(logging, level_name.upper(), default_level)
    logging.basicConfig(
        level=level,
        filename=log_file,
        format="[%(asctime)s] [%(levelname)s] %(name)s: %(message)s",
    )
