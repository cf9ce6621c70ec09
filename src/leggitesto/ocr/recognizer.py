"""
@file recognizer.py
@brief Sessione OCR: ciclo di vita del motore, configurazione, lettura.
@ingroup ocr_module

@details
TextRecognizer possiede l'handle del motore e tutta la configurazione.
Stati: UNINITIALIZED -> STARTING -> READY; un avvio fallito o stop() riportano a
UNINITIALIZED.

Errori:
- configurazione/avvio: RecognizerError, la sessione resta non valida
- singolo riconoscimento: loggato, risultato vuoto ("" oppure [])
- OEM/PSM fuori range: loggati e sostituiti dal default

La sessione non è thread-safe: chi la usa da più thread serializza gli accessi.
"""

from __future__ import annotations
import logging
from enum import Enum
from pathlib import Path
from typing import Callable

import cv2
import numpy as np

from leggitesto.domain.models import RecognizedItem, RecognizerStatus, Rectangle, Region
from .config import (
    OSD_MODES,
    Interpolation,
    OcrEngineMode,
    PageSegMode,
    RecognizerSettings,
    coerce_engine_mode,
    coerce_segmentation_mode,
)
from .engine import PAGE_ITERATOR_LEVEL_LINE, PAGE_ITERATOR_LEVEL_WORD, TesseractEngine
from .errors import ErrorKind, RecognizerError, TesseractEngineError
from .geometry import back_project_bounding_box, compute_resize_factor, relocate, scaling_policy
from .preprocess import preprocess_for_ocr
from .tessdata import OSD_LANGUAGE, has_traineddata, resolve_tessdata

logger = logging.getLogger(__name__)

# evita il warning di Tesseract sulla risoluzione stimata; il valore non incide sull'accuratezza
TESSERACT_USER_DEFINED_DPI = 300

DEFAULT_FONT_SIZE = 12


def glyph_height_for_font_size(size: int) -> float:
    """
    @brief Altezza di riga (px) di una X maiuscola per un font di `size` punti.
    @details Usa le metriche del font Hershey di OpenCV: altezza del glifo + baseline.
    """
    font = cv2.FONT_HERSHEY_SIMPLEX
    scale = cv2.getFontScaleFromHeight(font, size)
    (_, height), baseline = cv2.getTextSize("X", font, scale, 1)
    return float(height + baseline)


class SessionState(str, Enum):
    UNINITIALIZED = "uninitialized"
    STARTING = "starting"
    READY = "ready"


class TextRecognizer:
    """
    @brief Sessione di riconoscimento testo.
    @param settings Impostazioni (default da variabili d'ambiente).
    @param engine_factory Costruttore dell'handle motore (default TesseractEngine).

    @details
    Uso tipico:
        with TextRecognizer() as tr:
            text = tr.read(img)
    """

    def __init__(
        self,
        settings: RecognizerSettings | None = None,
        *,
        engine_factory: Callable[[], TesseractEngine] | None = None,
    ):
        self.settings = settings or RecognizerSettings()
        self._engine_factory = engine_factory or self._default_engine
        self._clear()

    def _default_engine(self) -> TesseractEngine:
        return TesseractEngine(tesseract_cmd=self.settings.tesseract_cmd, timeout=self.settings.timeout)

    def _clear(self) -> None:
        self.state = SessionState.UNINITIALIZED
        self.engine: TesseractEngine | None = None
        self.start_language = self.settings.language
        self.language = self.start_language
        self.start_data_path: Path | None = None
        self.data_path: Path | None = None
        self.data_path_provided = False
        self.has_osd_data = False
        self.engine_mode: OcrEngineMode | None = None
        self.segmentation_mode: PageSegMode | None = None
        self.variables: dict[str, str] = {}
        self.configs: list[str] = []
        self.should_restart = False
        self.uppercase_x_height = glyph_height_for_font_size(DEFAULT_FONT_SIZE)
        # deprecato: preferire set_font_size / set_uppercase_x_height
        self.optimum_dpi: float | None = None
        self.resize_interpolation = Interpolation.LINEAR

    def __enter__(self) -> "TextRecognizer":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    @property
    def is_valid(self) -> bool:
        return self.engine is not None and self.state is SessionState.READY

    # ------------------------------------------------------------------ ciclo di vita

    def start(self) -> "TextRecognizer":
        """
        @brief Avvia la sessione (idempotente).
        @return self, in stato READY.
        @throws RecognizerError se motore, cartella dati o lingua non sono utilizzabili;
                la sessione resta UNINITIALIZED (anche per qualunque altro errore).
        """
        if self.is_valid:
            return self

        self.state = SessionState.STARTING
        logger.debug("TextRecognizer: start: pytesseract on language %s", self.language)
        try:
            engine = self._engine_factory()
            engine.init()
            location = resolve_tessdata(self.settings)
            logger.debug("TextRecognizer: start: data folder: %s", location.path)
            engine.set_data_path(location.path)
            if not has_traineddata(location.path, self.language):
                raise RecognizerError(
                    ErrorKind.LANGUAGE_DATA_MISSING,
                    f"TextRecognizer: start: no {self.language}.traineddata - provide another language",
                )
        except OSError as exc:
            self._clear()
            logger.error("TextRecognizer: start: %s", exc)
            raise RecognizerError(ErrorKind.DATA_PATH_MISSING, f"TextRecognizer: start: {exc}") from exc
        except RecognizerError as exc:
            self._clear()
            logger.error("%s", exc.message)
            raise
        except Exception:
            self._clear()
            logger.exception("TextRecognizer: start: unexpected failure")
            raise

        self.engine = engine
        self.start_data_path = location.path
        self.data_path = location.path
        self.data_path_provided = location.provided
        self.has_osd_data = location.has_osd
        self.state = SessionState.READY
        logger.debug("TextRecognizer: start: language: %s", self.language)

        self.set_language(self.language)
        self.set_engine_mode(OcrEngineMode.DEFAULT)
        self.set_segmentation_mode(PageSegMode.AUTO)
        self.set_variable("user_defined_dpi", str(TESSERACT_USER_DEFINED_DPI))
        self.should_restart = False
        return self

    def stop(self) -> None:
        """@brief Scarta la sessione: nessuno stato sopravvive."""
        self._clear()

    def reset(self) -> "TextRecognizer":
        """
        @brief Riporta la sessione ai valori di avvio.
        @details
        Se sono state impostate variabili o config il motore viene ricreato,
        altrimenti si ripristinano solo i campi mutabili riusando lo stesso handle.
        """
        if not self.is_valid:
            return self.start()
        if self.should_restart:
            self.stop()
            return self.start()
        self.reset_uppercase_x_height()
        self.set_engine_mode(OcrEngineMode.DEFAULT)
        self.set_segmentation_mode(PageSegMode.AUTO)
        self._reset_data_path()
        self._reset_language()
        return self

    def status(self) -> RecognizerStatus | None:
        """@brief Logga (e restituisce) la configurazione corrente."""
        if not self.is_valid:
            logger.info("TextRecognizer: not running")
            return None
        status = RecognizerStatus(
            data_path=str(self.data_path) if self.data_path else None,
            language=self.language,
            engine_mode=int(self.engine_mode) if self.engine_mode is not None else None,
            segmentation_mode=int(self.segmentation_mode) if self.segmentation_mode is not None else None,
            uppercase_x_height=self.uppercase_x_height,
            factor=self.factor(),
            dpi=self.settings.screen_dpi,
            interpolation=self.resize_interpolation.value,
        )
        logger.info(
            "TextRecognizer: current settings\ndata = %s\n"
            "language(%s) oem(%s) psm(%s) height(%.1f) factor(%.2f) dpi(%d) %s",
            status.data_path,
            status.language,
            status.engine_mode,
            status.segmentation_mode,
            status.uppercase_x_height,
            status.factor,
            status.dpi,
            status.interpolation,
        )
        return status

    # ------------------------------------------------------------------ OEM / PSM

    def set_engine_mode(self, mode: int | OcrEngineMode) -> "TextRecognizer":
        mode = coerce_engine_mode(mode)
        if self.is_valid:
            self.engine_mode = mode
            self.engine.set_engine_mode(int(mode))
        return self

    def set_segmentation_mode(self, mode: int | PageSegMode) -> "TextRecognizer":
        """
        @brief Imposta il PSM; fuori range => AUTO.
        @throws RecognizerError (OSD_DATA_MISSING) per i modi OSD senza osd.traineddata.
        """
        mode = coerce_segmentation_mode(mode)
        if self.is_valid:
            if mode in OSD_MODES and not self.has_osd_data:
                raise RecognizerError(
                    ErrorKind.OSD_DATA_MISSING,
                    f"TextRecognizer: set_segmentation_mode({int(mode)}): needs OSD, "
                    "but no osd.traineddata found in tessdata folder",
                )
            self.segmentation_mode = mode
            self.engine.set_segmentation_mode(int(mode))
        return self

    def reset_segmentation_mode(self) -> "TextRecognizer":
        self.segmentation_mode = None
        if self.is_valid:
            self.engine.set_segmentation_mode(-1)
        return self

    def as_line(self) -> "TextRecognizer":
        return self.start().set_segmentation_mode(PageSegMode.SINGLE_LINE)

    def as_word(self) -> "TextRecognizer":
        return self.start().set_segmentation_mode(PageSegMode.SINGLE_WORD)

    def as_char(self) -> "TextRecognizer":
        return self.start().set_segmentation_mode(PageSegMode.SINGLE_CHAR)

    # ------------------------------------------------------------------ dati, lingua, variabili

    def set_data_path(self, new_data_path: str | Path) -> "TextRecognizer":
        """
        @brief Cambia cartella dati; deve esistere e contenere la lingua corrente.
        @throws RecognizerError (DATA_PATH_MISSING / LANGUAGE_DATA_MISSING).
        """
        if self.is_valid:
            path = Path(new_data_path)
            if not path.exists():
                raise RecognizerError(
                    ErrorKind.DATA_PATH_MISSING,
                    f"TextRecognizer: set_data_path: not found ({path})",
                )
            if not has_traineddata(path, self.language):
                raise RecognizerError(
                    ErrorKind.LANGUAGE_DATA_MISSING,
                    f"TextRecognizer: set_data_path: not valid - no {self.language}.traineddata ({path})",
                )
            self.data_path = path
            self.has_osd_data = has_traineddata(path, OSD_LANGUAGE)
            self.engine.set_data_path(path)
        return self

    def _reset_data_path(self) -> None:
        self.data_path = self.start_data_path
        self.has_osd_data = has_traineddata(self.data_path, OSD_LANGUAGE)
        self.engine.set_data_path(self.data_path)

    def set_language(self, language: str) -> "TextRecognizer":
        """
        @brief Cambia lingua; serve <data_path>/<language>.traineddata.
        @throws RecognizerError (LANGUAGE_DATA_MISSING).
        """
        if self.is_valid:
            if not has_traineddata(self.data_path, language):
                raise RecognizerError(
                    ErrorKind.LANGUAGE_DATA_MISSING,
                    f"TextRecognizer: set_language: no {language}.traineddata in {self.data_path}",
                )
            self.language = language
            self.engine.set_language(language)
        return self

    def _reset_language(self) -> None:
        self.language = self.start_language
        self.engine.set_language(self.language)

    def set_variable(self, key: str, value: str) -> "TextRecognizer":
        if self.is_valid:
            self.should_restart = True
            self.variables[key] = value
            self.engine.set_variable(key, value)
        return self

    def set_configs(self, *configs: str) -> "TextRecognizer":
        if self.is_valid:
            self.should_restart = True
            self.configs = list(configs)
            self.engine.set_configs(self.configs)
        return self

    # ------------------------------------------------------------------ scala

    def set_font_size(self, size: int) -> None:
        """@brief Suggerimento: dimensione (pt) del font atteso."""
        if size <= 0:
            raise ValueError(f"font size must be positive: {size}")
        height = glyph_height_for_font_size(size)
        if height <= 0:
            raise ValueError(f"font size {size} gives no usable glyph height")
        self.uppercase_x_height = height

    def set_uppercase_x_height(self, height: float) -> None:
        """@brief Suggerimento: altezza (px) attesa di una X maiuscola."""
        if height <= 0:
            raise ValueError(f"uppercase X height must be positive: {height}")
        self.uppercase_x_height = height

    def reset_uppercase_x_height(self) -> None:
        self.uppercase_x_height = glyph_height_for_font_size(DEFAULT_FONT_SIZE)

    def set_resize_interpolation(self, interpolation: Interpolation | str) -> None:
        self.resize_interpolation = Interpolation(interpolation)

    def factor(self) -> float:
        policy = scaling_policy(self.uppercase_x_height, self.optimum_dpi, self.settings.screen_dpi)
        return compute_resize_factor(policy)

    def optimize(self, image: np.ndarray) -> np.ndarray:
        """@brief Immagine pronta per l'OCR (l'input non viene modificato)."""
        processed, steps = preprocess_for_ocr(
            image, factor=self.factor(), interpolation=self.resize_interpolation
        )
        logger.debug("TextRecognizer: optimize: %s", ", ".join(steps))
        return processed

    def relocate_as_rectangle(self, rect: Rectangle, base: Region) -> Rectangle:
        reg = relocate(rect, base, self.factor())
        return Rectangle(x=reg.x, y=reg.y, w=reg.w, h=reg.h)

    # ------------------------------------------------------------------ lettura

    def read(self, image: np.ndarray) -> str:
        """
        @brief OCR dell'immagine.
        @return Testo riconosciuto (trim), "" se la sessione non è valida o il motore fallisce.
        """
        if not self.is_valid:
            logger.error("TextRecognizer: read: not valid")
            return ""
        try:
            return self.engine.recognize_text(self.optimize(image)).strip()
        except TesseractEngineError as exc:
            logger.error("TextRecognizer: read: %s", exc)
        return ""

    def read_words(self, image: np.ndarray, base: Region | None = None) -> list[RecognizedItem]:
        return self._read_text_items(image, PAGE_ITERATOR_LEVEL_WORD, base)

    def read_lines(self, image: np.ndarray, base: Region | None = None) -> list[RecognizedItem]:
        return self._read_text_items(image, PAGE_ITERATOR_LEVEL_LINE, base)

    def _read_text_items(
        self, image: np.ndarray, level: int, base: Region | None
    ) -> list[RecognizedItem]:
        if not self.is_valid:
            logger.error("TextRecognizer: read text items: not valid")
            return []
        resized = self.optimize(image)
        try:
            text_items = self.engine.recognize_words(resized, level)
        except TesseractEngineError as exc:
            logger.error("TextRecognizer: read text items: %s", exc)
            return []

        w_factor = image.shape[1] / resized.shape[1]
        h_factor = image.shape[0] / resized.shape[0]
        off_x = base.x if base is not None else 0
        off_y = base.y if base is not None else 0

        items = []
        for text_item in text_items:
            real_box = back_project_bounding_box(text_item.box, w_factor, h_factor, off_x, off_y)
            items.append(
                RecognizedItem(rect=real_box, score=text_item.confidence, text=text_item.text, parent=base)
            )
        return items


def do_ocr(image: np.ndarray, settings: RecognizerSettings | None = None) -> str:
    """
    @brief OCR in un colpo solo: avvia una sessione, legge e la chiude.
    @throws RecognizerError se la sessione non può essere avviata.
    """
    with TextRecognizer(settings) as tr:
        return tr.read(image)
