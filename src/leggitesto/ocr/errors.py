"""
@file errors.py
@brief Errori di configurazione/avvio della sessione OCR.
@ingroup ocr_module

@details
Gli errori di configurazione sono fatali per la configurazione richiesta ma non
terminano il processo: è il chiamante a decidere come reagire.
Gli errori del singolo riconoscimento (TesseractEngineError) restano interni alla
sessione, che li logga e restituisce un risultato vuoto.
"""

from __future__ import annotations
from enum import Enum


class ErrorKind(str, Enum):
    """@brief Categorie di errore fatale."""
    ENGINE_UNAVAILABLE = "engine_unavailable"
    DATA_PATH_MISSING = "data_path_missing"
    LANGUAGE_DATA_MISSING = "language_data_missing"
    OSD_DATA_MISSING = "osd_data_missing"


class RecognizerError(Exception):
    """
    @brief Errore fatale di configurazione della sessione OCR.
    @param kind Categoria (ErrorKind).
    @param message Messaggio leggibile.
    """

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    def __str__(self) -> str:
        return f"fatal: {self.message}"


class TesseractEngineError(Exception):
    """@brief Errore del motore durante una singola chiamata di riconoscimento."""
