"""
@file preprocess.py
@brief Pre-processing di immagini catturate per aumentare la qualità OCR.
@ingroup ocr_module

@details
Il pre-processing porta il testo nelle condizioni in cui Tesseract rende meglio:
- conversione in scala di grigi
- unsharp mask stretto (elimina artefatti del subpixel rendering)
- resize adattivo (altezza glifo ottimale)
- unsharp mask largo (recupera i bordi persi nel resize)
- inversione se lo sfondo è prevalentemente scuro

L'output include anche la lista degli step applicati per auditing/qualità.
"""
from __future__ import annotations
import math

import cv2
import numpy as np

from .config import Interpolation

SHARPEN_SIGMA_BEFORE_RESIZE = 3
SHARPEN_SIGMA_AFTER_RESIZE = 5

# metà del range 0..255
_DARK_BACKGROUND_MEAN = 127


def to_gray(image: np.ndarray) -> np.ndarray:
    """
    @brief Converte in scala di grigi (gray, BGR o BGRA).
    @return Nuova immagine a singolo canale; l'input non viene modificato.
    """
    if image.ndim == 2:
        return image.copy()
    channels = image.shape[2]
    if channels == 1:
        return image[:, :, 0].copy()
    if channels == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
    return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)


def unsharp_mask(gray: np.ndarray, sigma: float) -> np.ndarray:
    """
    @brief Sharpening: 1.5 * originale - 0.5 * sfocata (saturato 0..255).
    @param gray Immagine in scala di grigi.
    @param sigma Sigma del blur gaussiano; il kernel è derivato dal sigma.
    """
    blurred = cv2.GaussianBlur(gray, (0, 0), sigma, sigmaY=sigma)
    return cv2.addWeighted(gray, 1.5, blurred, -0.5, 0)


def resize_by_factor(gray: np.ndarray, factor: float, interpolation: Interpolation) -> np.ndarray:
    return cv2.resize(gray, None, fx=factor, fy=factor, interpolation=interpolation.cv2_flag)


def is_dark_background(gray: np.ndarray) -> bool:
    return cv2.mean(gray)[0] < _DARK_BACKGROUND_MEAN


def preprocess_for_ocr(
    image: np.ndarray,
    *,
    factor: float = 1.0,
    interpolation: Interpolation = Interpolation.LINEAR,
) -> tuple[np.ndarray, list[str]]:
    """
    @brief Applica la pipeline di ottimizzazione ad un'immagine catturata.
    @param image Immagine gray/BGR/BGRA (es. output di cv2.imread o di uno screenshot).
    @param factor Fattore di resize (vedi geometry.compute_resize_factor).
    @param interpolation Interpolazione usata nel resize.
    @return Tuple (image_gray, steps) dove:
            - image_gray è l'immagine pronta per OCR
            - steps è l'elenco degli step applicati in ordine

    @throws ValueError Se l'immagine è vuota o non valida.
    """
    if image is None or image.size == 0:
        raise ValueError("Immagine vuota o non valida")

    steps: list[str] = []

    gray = to_gray(image)
    steps.append("to_gray")

    gray = unsharp_mask(gray, SHARPEN_SIGMA_BEFORE_RESIZE)
    steps.append(f"unsharp_mask(sigma={SHARPEN_SIGMA_BEFORE_RESIZE})")

    if factor > 0 and not math.isclose(factor, 1.0):
        gray = resize_by_factor(gray, factor, interpolation)
        steps.append(f"resize(factor={factor:.2f}, {interpolation.value})")

    gray = unsharp_mask(gray, SHARPEN_SIGMA_AFTER_RESIZE)
    steps.append(f"unsharp_mask(sigma={SHARPEN_SIGMA_AFTER_RESIZE})")

    # testo chiaro su sfondo scuro: Tesseract vuole testo scuro su chiaro
    if is_dark_background(gray):
        gray = cv2.bitwise_not(gray)
        steps.append("invert")

    return gray, steps
