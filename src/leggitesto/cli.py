"""
@file cli.py
@brief CLI per OCR di immagini catturate.
@ingroup cli_module

@details
Comandi:
- read: stampa il testo riconosciuto
- words / lines: stampa in JSON parole o righe con box in coordinate originali
- status: avvia la sessione e stampa la configurazione corrente

Opzioni rilevanti per tuning OCR:
- --psm / --oem per regolare Tesseract
- --x-height / --font-size / --interpolation per regolare il resize
- --offset-x / --offset-y per riportare i box in coordinate schermo
"""

from __future__ import annotations
import argparse
import json
import sys
from typing import Callable

import cv2

from leggitesto.domain.models import Region
from leggitesto.logging_config import configure_logging
from leggitesto.ocr.config import Interpolation, RecognizerSettings
from leggitesto.ocr.engine import TesseractEngine
from leggitesto.ocr.errors import RecognizerError
from leggitesto.ocr.recognizer import TextRecognizer


def _add_common_args(p: argparse.ArgumentParser, *, image: bool = True) -> None:
    if image:
        p.add_argument("--image", required=True)
    p.add_argument("--lang", default=None, help="Lingua Tesseract (default: LEGGITESTO_LANGUAGE o eng)")
    p.add_argument("--data-path", default=None, help="Cartella che contiene tessdata/")
    p.add_argument("--psm", type=int, default=None, help="Tesseract PSM (default: 3)")
    p.add_argument("--oem", type=int, default=None, help="Tesseract OEM (default: 3)")
    p.add_argument("--x-height", type=float, default=None, help="Altezza attesa (px) della X maiuscola")
    p.add_argument("--font-size", type=int, default=None, help="Dimensione attesa (pt) del font")
    p.add_argument(
        "--interpolation",
        choices=[i.value for i in Interpolation],
        default=None,
        help="Interpolazione per il resize (default: linear)",
    )
    p.add_argument("--log-level", default=None)


def build_recognizer(
    args: argparse.Namespace,
    *,
    engine_factory: Callable[[], TesseractEngine] | None = None,
) -> TextRecognizer:
    """
    @brief Crea e avvia la sessione secondo gli argomenti CLI.
    @throws RecognizerError se la configurazione richiesta non è utilizzabile.
    @throws ValueError per suggerimenti di dimensione non positivi.
    """
    overrides = {}
    if args.lang:
        overrides["language"] = args.lang
    if args.data_path:
        overrides["data_path"] = args.data_path
    settings = RecognizerSettings(**overrides)
    configure_logging(args.log_level or settings.log_level)

    tr = TextRecognizer(settings, engine_factory=engine_factory).start()
    try:
        if args.oem is not None:
            tr.set_engine_mode(args.oem)
        if args.psm is not None:
            tr.set_segmentation_mode(args.psm)
        if args.font_size is not None:
            tr.set_font_size(args.font_size)
        if args.x_height is not None:
            tr.set_uppercase_x_height(args.x_height)
        if args.interpolation:
            tr.set_resize_interpolation(args.interpolation)
    except (RecognizerError, ValueError):
        tr.stop()
        raise
    return tr


def main(
    argv: list[str] | None = None,
    *,
    engine_factory: Callable[[], TesseractEngine] | None = None,
) -> int:
    """
    @brief Entry point CLI.
    @return Exit code (0 ok, 2 configurazione non valida).
    """
    p = argparse.ArgumentParser(prog="leggitesto")
    sub = p.add_subparsers(dest="cmd", required=True)

    read = sub.add_parser("read", help="Stampa il testo riconosciuto")
    _add_common_args(read)

    for name, help_text in (("words", "Parole con box (JSON)"), ("lines", "Righe con box (JSON)")):
        items = sub.add_parser(name, help=help_text)
        _add_common_args(items)
        items.add_argument("--offset-x", type=int, default=None, help="Origine x della regione catturata")
        items.add_argument("--offset-y", type=int, default=None, help="Origine y della regione catturata")

    status = sub.add_parser("status", help="Avvia la sessione e stampa la configurazione")
    _add_common_args(status, image=False)

    args = p.parse_args(argv)

    img = None
    if args.cmd != "status":
        img = cv2.imread(args.image, cv2.IMREAD_UNCHANGED)
        if img is None:
            raise FileNotFoundError(f"Impossibile leggere immagine: {args.image}")

    try:
        tr = build_recognizer(args, engine_factory=engine_factory)
    except (RecognizerError, ValueError) as exc:
        print(str(exc), file=sys.stderr)
        return 2

    try:
        if args.cmd == "status":
            print(tr.status().model_dump_json(indent=2))
        elif args.cmd == "read":
            print(tr.read(img))
        else:
            base = None
            if args.offset_x is not None or args.offset_y is not None:
                h, w = img.shape[:2]
                base = Region(x=args.offset_x or 0, y=args.offset_y or 0, w=w, h=h)
            reader = tr.read_words if args.cmd == "words" else tr.read_lines
            found = [item.model_dump() for item in reader(img, base)]
            print(json.dumps(found, ensure_ascii=False, indent=2))
    finally:
        tr.stop()
    return 0


if __name__ == "__main__":
    sys.exit(main())
