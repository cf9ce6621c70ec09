"""
@file logging_config.py
@brief Configurazione del logging per la CLI.
@ingroup cli_module
"""

from __future__ import annotations
import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str | int = "INFO") -> None:
    """
    @brief Installa un handler su stderr per il logger radice.
    @param level Livello (nome o valore numerico).
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)
