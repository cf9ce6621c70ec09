"""
@file tessdata.py
@brief Risoluzione ed estrazione della cartella dati lingua (tessdata).
@ingroup ocr_module

@details
All'avvio della sessione:
- estrae i *.traineddata inclusi nella cartella applicativa se mancano
  (o se è richiesto un refresh)
- se l'utente ha fornito data_path usa <data_path>/tessdata
- verifica che la cartella esista e rileva la presenza di osd.traineddata
"""

from __future__ import annotations
import logging
import shutil
import time
from dataclasses import dataclass
from pathlib import Path

from .config import RecognizerSettings
from .errors import ErrorKind, RecognizerError

logger = logging.getLogger(__name__)

TESSDATA_DIRNAME = "tessdata"
TRAINEDDATA_SUFFIX = ".traineddata"
OSD_LANGUAGE = "osd"


def traineddata_file(folder: str | Path, language: str) -> Path:
    return Path(folder) / f"{language}{TRAINEDDATA_SUFFIX}"


def has_traineddata(folder: str | Path, language: str) -> bool:
    return traineddata_file(folder, language).exists()


@dataclass(frozen=True)
class TessdataLocation:
    """
    @brief Cartella dati risolta per la sessione.
    @details
    - path: cartella assoluta con i *.traineddata
    - provided: True se indicata dall'utente (data_path)
    - has_osd: True se contiene osd.traineddata
    """
    path: Path
    provided: bool
    has_osd: bool


def default_tessdata_folder(settings: RecognizerSettings) -> Path:
    return Path(settings.app_folder) / "tesseract" / TESSDATA_DIRNAME


def extract_bundled_data(target_folder: Path, source_folder: Path | None) -> list[Path]:
    """
    @brief Copia i *.traineddata inclusi nella cartella di destinazione.
    @param target_folder Cartella tessdata da popolare.
    @param source_folder Cartella sorgente; None o inesistente => nessuna copia.
    @return Elenco dei file estratti.
    """
    if source_folder is None or not Path(source_folder).is_dir():
        return []
    target_folder.mkdir(parents=True, exist_ok=True)
    files: list[Path] = []
    for src in sorted(Path(source_folder).glob(f"*{TRAINEDDATA_SUFFIX}")):
        dst = target_folder / src.name
        shutil.copy2(src, dst)
        files.append(dst)
    return files


def resolve_tessdata(settings: RecognizerSettings) -> TessdataLocation:
    """
    @brief Determina la cartella tessdata della sessione.
    @param settings Impostazioni correnti.
    @return TessdataLocation risolta.

    @throws RecognizerError (DATA_PATH_MISSING) se nessuna cartella valida esiste.
    """
    folder = default_tessdata_folder(settings)
    should_extract = False
    if folder.exists():
        if settings.refresh_data:
            should_extract = True
            shutil.rmtree(folder)
    else:
        should_extract = True

    if should_extract:
        started = time.monotonic()
        files = extract_bundled_data(folder, settings.bundled_data_path)
        logger.debug(
            "TextRecognizer: start: extracting tessdata took %d msec",
            int((time.monotonic() - started) * 1000),
        )
        if not files:
            logger.error("TextRecognizer: start: export tessdata not possible")

    provided = False
    if settings.data_path is not None:
        folder = Path(settings.data_path) / TESSDATA_DIRNAME
        provided = True

    if not folder.exists():
        if provided:
            raise RecognizerError(
                ErrorKind.DATA_PATH_MISSING,
                f"TextRecognizer: start: provided tessdata folder not found: {folder}",
            )
        raise RecognizerError(
            ErrorKind.DATA_PATH_MISSING,
            "TextRecognizer: start: no valid tesseract data folder",
        )

    folder = folder.resolve()
    return TessdataLocation(
        path=folder,
        provided=provided,
        has_osd=has_traineddata(folder, OSD_LANGUAGE),
    )
