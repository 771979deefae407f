"""Logging setup shared by the simulation modules.

Import ``logger`` from this module instead of configuring handlers in
several places.
"""

import logging
import sys

logger = logging.getLogger("smote_sim")

if not logger.handlers:
    handler = logging.StreamHandler(stream=sys.stdout)
    formatter = logging.Formatter(
        fmt="[%(asctime)s] %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
