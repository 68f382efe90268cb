from __future__ import annotations

import logging
from pathlib import Path
from op_export.config.settings import get_settings


def setup_logging(verbose: bool = False) -> None:
    s = get_settings()
    level = logging.DEBUG if verbose else getattr(logging, s.log_level.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if s.log_file:
        Path(s.log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(s.log_file, encoding="utf-8"))

    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(message)s",
        handlers=handlers,
    )
