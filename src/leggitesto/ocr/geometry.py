"""
@file geometry.py
@brief Fattori di scala e riproiezione dei box OCR.
@ingroup ocr_module

@details
Funzioni pure, senza stato:
- politica di scala (altezza glifo oppure DPI legacy) e relativo fattore di resize
- riproiezione dei bounding box dallo spazio dell'immagine elaborata a quello
  dell'immagine originale (o dello schermo)
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Union

from leggitesto.domain.models import Rectangle, Region

# altezza (px) di una X maiuscola con cui Tesseract rende meglio, valore empirico
OPTIMAL_GLYPH_HEIGHT = 30


@dataclass(frozen=True)
class GlyphHeightScaling:
    """@brief Scala in base all'altezza attesa della X maiuscola (px)."""
    glyph_height: float


@dataclass(frozen=True)
class DpiScaling:
    """@brief Scala legacy: DPI desiderati rispetto ai DPI reali dello schermo."""
    target_dpi: float
    actual_dpi: float


ScalingPolicy = Union[GlyphHeightScaling, DpiScaling]


def scaling_policy(
    glyph_height: float,
    optimum_dpi: float | None = None,
    actual_dpi: float = 96,
) -> ScalingPolicy:
    """
    @brief Sceglie la politica di scala.
    @param glyph_height Altezza X maiuscola attesa (px).
    @param optimum_dpi DPI legacy; se impostato prevale sull'altezza glifo.
    @param actual_dpi DPI reali dello schermo.
    @return DpiScaling se optimum_dpi è impostato, altrimenti GlyphHeightScaling.
    """
    if optimum_dpi is not None:
        return DpiScaling(target_dpi=optimum_dpi, actual_dpi=actual_dpi)
    return GlyphHeightScaling(glyph_height=glyph_height)


def compute_resize_factor(policy: ScalingPolicy) -> float:
    """
    @brief Fattore di resize da applicare prima dell'OCR.
    @param policy Politica di scala.
    @return target_dpi / actual_dpi oppure OPTIMAL_GLYPH_HEIGHT / glyph_height.
    """
    if isinstance(policy, DpiScaling):
        return policy.target_dpi / policy.actual_dpi
    return OPTIMAL_GLYPH_HEIGHT / policy.glyph_height


def back_project_bounding_box(
    box: Rectangle,
    width_scale: float,
    height_scale: float,
    offset_x: int = 0,
    offset_y: int = 0,
) -> Rectangle:
    """
    @brief Riporta un box dall'immagine elaborata all'immagine originale.
    @param box Box nello spazio dell'immagine elaborata.
    @param width_scale Rapporto larghezza originale / elaborata.
    @param height_scale Rapporto altezza originale / elaborata.
    @param offset_x Origine x della regione base (0 se assente).
    @param offset_y Origine y della regione base (0 se assente).
    @return Rectangle nello spazio del chiamante.

    @note Il box viene allargato di un pixel per lato (arrotondamenti e
    antialiasing ai bordi dei glifi).
    """
    return Rectangle(
        x=offset_x + int(box.x * width_scale) - 1,
        y=offset_y + int(box.y * height_scale) - 1,
        w=1 + int(box.w * width_scale) + 2,
        h=1 + int(box.h * height_scale) + 2,
    )


def relocate(box: Rectangle, base: Region, factor: float) -> Region:
    """
    @brief Inversa della scala uniforme + offset della regione base.
    @param box Box nello spazio scalato.
    @param base Regione di riferimento (origine e schermo).
    @param factor Fattore di scala uniforme applicato in origine.
    @return Region nello spazio di base, sullo stesso schermo.
    """
    return Region(
        x=base.x + int(box.x / factor),
        y=base.y + int(box.y / factor),
        w=int(1 + box.w / factor),
        h=int(1 + box.h / factor),
        screen_id=base.screen_id,
    )
