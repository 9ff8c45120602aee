from __future__ import annotations

import logging
import os
import sys


def setup_logging(debug: bool) -> None:
    level = logging.DEBUG if debug else logging.INFO
    # Allow env override for batch runs
    level_name = os.getenv("LYRIC_KEYFRAMES_LOG_LEVEL")
    if level_name:
        try:
            level = getattr(logging, level_name.upper())
        except AttributeError:
            pass

    # stdout carries exported data
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    if not debug:
        logging.getLogger("urllib3").setLevel(logging.WARNING)
