"""
@file engine.py
@brief Wrapper per il motore OCR.
@ingroup ocr_module

@details
Usa Tesseract tramite pytesseract. Il wrapper separa:
- configurazione OCR (dati lingua, lingua, OEM, PSM, variabili, file config)
- esecuzione OCR (testo semplice oppure parole/righe con box)
- standardizzazione output (box + confidenza 0..1 + testo)

Un'istanza di TesseractEngine è l'handle del motore posseduto dalla sessione.
"""

from __future__ import annotations
from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path

import numpy as np
import pytesseract

from leggitesto.domain.models import Rectangle
from .errors import ErrorKind, RecognizerError, TesseractEngineError

# livelli del page iterator Tesseract (RIL_TEXTLINE, RIL_WORD)
PAGE_ITERATOR_LEVEL_LINE = 2
PAGE_ITERATOR_LEVEL_WORD = 3

# livello "word" nelle righe di image_to_data
_TSV_WORD_LEVEL = 5


@dataclass
class EngineWord:
    """
    @brief Parola o riga restituita dal motore, nello spazio dell'immagine elaborata.
    """
    left: int
    top: int
    width: int
    height: int
    confidence: float
    text: str

    @property
    def box(self) -> Rectangle:
        return Rectangle(x=self.left, y=self.top, w=self.width, h=self.height)


def _normalize_confidence(raw_conf: float) -> float:
    # Tesseract riporta 0..100, -1 per righe senza testo
    if raw_conf < 0:
        return 0.0
    return max(0.0, min(1.0, raw_conf / 100.0))


@dataclass
class TesseractEngine:
    """
    @brief Handle del motore Tesseract.
    @details
    Tiene lo stato di configurazione che viene tradotto, ad ogni chiamata,
    nella stringa di config pytesseract.
    """
    tesseract_cmd: str | None = None
    timeout: float = 0
    data_path: Path | None = None
    language: str = "eng"
    engine_mode: int = 3
    segmentation_mode: int = -1
    variables: dict[str, str] = field(default_factory=dict)
    configs: list[str] = field(default_factory=list)
    version: str | None = None

    def init(self) -> None:
        """
        @brief Verifica che l'eseguibile tesseract sia disponibile.
        @throws RecognizerError (ENGINE_UNAVAILABLE) se tesseract non è installato.
        """
        if self.tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = self.tesseract_cmd
        try:
            self.version = str(pytesseract.get_tesseract_version())
        except pytesseract.TesseractNotFoundError as exc:
            raise RecognizerError(
                ErrorKind.ENGINE_UNAVAILABLE,
                f"TextRecognizer: start: Tesseract library problems: {exc}",
            ) from exc

    def set_data_path(self, path: str | Path) -> None:
        self.data_path = Path(path)

    def set_language(self, language: str) -> None:
        self.language = language

    def set_engine_mode(self, mode: int) -> None:
        self.engine_mode = int(mode)

    def set_segmentation_mode(self, mode: int) -> None:
        self.segmentation_mode = int(mode)

    def set_variable(self, key: str, value: str) -> None:
        self.variables[key] = value

    def set_configs(self, configs: list[str]) -> None:
        self.configs = list(configs)

    def build_config(self) -> str:
        """
        @brief Stringa di configurazione per pytesseract.
        @return Es. '--oem 3 --psm 3 --tessdata-dir "/x/tessdata" -c user_defined_dpi=300'.
        """
        parts = [f"--oem {self.engine_mode}"]
        if self.segmentation_mode >= 0:
            parts.append(f"--psm {self.segmentation_mode}")
        if self.data_path is not None:
            parts.append(f'--tessdata-dir "{self.data_path}"')
        for key, value in self.variables.items():
            parts.append(f"-c {key}={value}")
        # i file di config vanno in coda alla riga di comando
        parts.extend(self.configs)
        return " ".join(parts)

    def recognize_text(self, image: np.ndarray) -> str:
        """
        @brief OCR testo semplice.
        @throws TesseractEngineError se tesseract fallisce sulla chiamata.
        """
        try:
            return pytesseract.image_to_string(
                image, lang=self.language, config=self.build_config(), timeout=self.timeout
            )
        except RuntimeError as exc:  # TesseractError e timeout
            raise TesseractEngineError(str(exc)) from exc

    def recognize_words(self, image: np.ndarray, level: int) -> list[EngineWord]:
        """
        @brief OCR con box a livello parola o riga.
        @param image Immagine già ottimizzata.
        @param level PAGE_ITERATOR_LEVEL_WORD oppure PAGE_ITERATOR_LEVEL_LINE.
        @return Lista di EngineWord in ordine di lettura.
        @throws TesseractEngineError se tesseract fallisce sulla chiamata.
        """
        try:
            data = pytesseract.image_to_data(
                image,
                lang=self.language,
                config=self.build_config(),
                timeout=self.timeout,
                output_type=pytesseract.Output.DICT,
            )
        except RuntimeError as exc:
            raise TesseractEngineError(str(exc)) from exc

        words = _collect_words(data)
        if level == PAGE_ITERATOR_LEVEL_LINE:
            return _group_lines(words)
        return [w for _, w in words]


def _collect_words(data: dict) -> list[tuple[tuple[int, int, int, int], EngineWord]]:
    words = []
    for i, text in enumerate(data.get("text", [])):
        if int(data["level"][i]) != _TSV_WORD_LEVEL or not str(text).strip():
            continue
        key = (
            int(data["page_num"][i]),
            int(data["block_num"][i]),
            int(data["par_num"][i]),
            int(data["line_num"][i]),
        )
        words.append(
            (
                key,
                EngineWord(
                    left=int(data["left"][i]),
                    top=int(data["top"][i]),
                    width=int(data["width"][i]),
                    height=int(data["height"][i]),
                    confidence=_normalize_confidence(float(data["conf"][i])),
                    text=str(text),
                ),
            )
        )
    return words


def _group_lines(words: list[tuple[tuple[int, int, int, int], EngineWord]]) -> list[EngineWord]:
    # una riga = parole con stesso (pagina, blocco, paragrafo, riga)
    grouped: dict[tuple[int, int, int, int], list[EngineWord]] = defaultdict(list)
    for key, word in words:
        grouped[key].append(word)

    lines = []
    for key in sorted(grouped):
        members = grouped[key]
        x0 = min(w.left for w in members)
        y0 = min(w.top for w in members)
        x1 = max(w.left + w.width for w in members)
        y1 = max(w.top + w.height for w in members)
        lines.append(
            EngineWord(
                left=x0,
                top=y0,
                width=x1 - x0,
                height=y1 - y0,
                confidence=sum(w.confidence for w in members) / len(members),
                text=" ".join(w.text for w in members),
            )
        )
    return lines
