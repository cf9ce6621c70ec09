"""
@file config.py
@brief Modalità del motore OCR, interpolazione e impostazioni della sessione.
@ingroup ocr_module

@details
- OcrEngineMode / PageSegMode: enumerazioni chiuse dei codici interi Tesseract
  (--oem / --psm), con coercizione dei valori fuori range al default
- Interpolation: metodi di resize OpenCV selezionabili per nome
- RecognizerSettings: impostazioni da ambiente (prefisso LEGGITESTO_)
"""

from __future__ import annotations
import logging
import operator
from enum import Enum, IntEnum
from pathlib import Path
from typing import Optional

import cv2
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class OcrEngineMode(IntEnum):
    """@brief OEM Tesseract (0-3)."""
    TESSERACT_ONLY = 0
    LSTM_ONLY = 1
    TESSERACT_LSTM_COMBINED = 2
    DEFAULT = 3


class PageSegMode(IntEnum):
    """
    @brief PSM Tesseract (0-13).
    @details
    0 solo OSD, 1 automatico con OSD, 2 automatico senza OSD né OCR,
    3 automatico (default), 4 colonna singola, 5 blocco verticale, 6 blocco uniforme,
    7 riga singola, 8 parola singola, 9 parola in cerchio, 10 carattere singolo,
    11 testo sparso, 12 testo sparso con OSD, 13 riga grezza.
    """
    OSD_ONLY = 0
    AUTO_OSD = 1
    AUTO_ONLY = 2
    AUTO = 3
    SINGLE_COLUMN = 4
    SINGLE_BLOCK_VERT_TEXT = 5
    SINGLE_BLOCK = 6
    SINGLE_LINE = 7
    SINGLE_WORD = 8
    CIRCLE_WORD = 9
    SINGLE_CHAR = 10
    SPARSE_TEXT = 11
    SPARSE_TEXT_OSD = 12
    RAW_LINE = 13


# modalità che richiedono osd.traineddata
OSD_MODES = frozenset({PageSegMode.OSD_ONLY, PageSegMode.AUTO_OSD, PageSegMode.SPARSE_TEXT_OSD})


class Interpolation(str, Enum):
    """@brief Interpolazione usata nel resize pre-OCR."""
    NEAREST = "nearest"
    LINEAR = "linear"
    CUBIC = "cubic"
    AREA = "area"
    LANCZOS4 = "lanczos4"
    LINEAR_EXACT = "linear_exact"

    @property
    def cv2_flag(self) -> int:
        return _CV2_INTERPOLATION[self]


_CV2_INTERPOLATION = {
    Interpolation.NEAREST: cv2.INTER_NEAREST,
    Interpolation.LINEAR: cv2.INTER_LINEAR,
    Interpolation.CUBIC: cv2.INTER_CUBIC,
    Interpolation.AREA: cv2.INTER_AREA,
    Interpolation.LANCZOS4: cv2.INTER_LANCZOS4,
    Interpolation.LINEAR_EXACT: cv2.INTER_LINEAR_EXACT,
}


def _mode_code(value) -> int:
    # solo codici interi: 2.7 o "x" sono invalidi, 3.0 vale 3
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(value)
        return int(value)
    return operator.index(value)


def coerce_engine_mode(value: int | OcrEngineMode) -> OcrEngineMode:
    """
    @brief Converte un codice OEM; fuori range logga e usa DEFAULT (3).
    """
    try:
        return OcrEngineMode(_mode_code(value))
    except (TypeError, ValueError):
        logger.error("Tesseract: oem invalid (%s) - using default (3)", value)
        return OcrEngineMode.DEFAULT


def coerce_segmentation_mode(value: int | PageSegMode) -> PageSegMode:
    """
    @brief Converte un codice PSM; fuori range logga e usa AUTO (3).
    """
    try:
        return PageSegMode(_mode_code(value))
    except (TypeError, ValueError):
        logger.error("Tesseract: psm invalid (%s) - using default (3)", value)
        return PageSegMode.AUTO


class RecognizerSettings(BaseSettings):
    """
    @brief Impostazioni della sessione OCR.
    @details
    Lette da variabili d'ambiente LEGGITESTO_* oppure passate esplicitamente.
    - language: lingua iniziale della sessione
    - data_path: cartella fornita dall'utente che contiene tessdata/
    - app_folder: cartella applicativa dove estrarre i dati lingua inclusi
    - bundled_data_path: sorgente dei *.traineddata da estrarre
    - refresh_data: se True riestrae i dati anche se già presenti
    - screen_dpi: DPI reali dello schermo (scala legacy)
    - tesseract_cmd: eseguibile tesseract se non è nel PATH
    - timeout: secondi per singola chiamata OCR (0 = nessuno)
    """
    model_config = SettingsConfigDict(env_prefix="LEGGITESTO_")

    language: str = "eng"
    data_path: Optional[Path] = None
    app_folder: Path = Field(default_factory=lambda: Path.home() / ".leggitesto")
    bundled_data_path: Optional[Path] = None
    refresh_data: bool = False
    screen_dpi: int = 96
    tesseract_cmd: Optional[str] = None
    timeout: float = 0
    log_level: str = "INFO"
