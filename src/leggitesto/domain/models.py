"""
@file models.py
@brief Modelli dominio (rettangoli, regioni, risultati OCR) tramite Pydantic.
@ingroup domain_module

@details
Value object scambiati tra sessione OCR, geometria e CLI:
- Rectangle: box in pixel (x, y, larghezza, altezza)
- Region: area dello schermo/immagine usata come origine delle coordinate
- RecognizedItem: parola o riga riconosciuta, già in coordinate chiamante
- RecognizerStatus: fotografia della configurazione corrente (diagnostica)
"""

from __future__ import annotations
from typing import Optional
from pydantic import BaseModel


class Rectangle(BaseModel):
    """@brief Box in pixel, origine in alto a sinistra."""
    x: int = 0
    y: int = 0
    w: int = 0
    h: int = 0


class Region(Rectangle):
    """
    @brief Regione di cattura (schermo o immagine) a cui riferire i risultati.
    @details screen_id identifica lo schermo di provenienza (0 = primario).
    """
    screen_id: int = 0


class RecognizedItem(BaseModel):
    """
    @brief Parola/riga riconosciuta con posizione nello spazio del chiamante.
    @details
    - rect: box già riproiettato (e traslato se presente parent)
    - score: confidenza normalizzata 0..1
    - text: testo riconosciuto
    - parent: regione base usata per l'offset, se fornita
    """
    rect: Rectangle
    score: float
    text: str
    parent: Optional[Region] = None


class RecognizerStatus(BaseModel):
    """@brief Configurazione corrente della sessione OCR, per il dump diagnostico."""
    data_path: Optional[str] = None
    language: str
    engine_mode: Optional[int] = None
    segmentation_mode: Optional[int] = None
    uppercase_x_height: float
    factor: float
    dpi: int
    interpolation: str
