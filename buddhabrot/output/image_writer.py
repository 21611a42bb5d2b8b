from __future__ import annotations

import os

import numpy as np
from PIL import Image

from buddhabrot.util.logging_setup import get_logger


def _ensure_parent(path: str) -> None:
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)


def write_ppm(path: str, rgb: np.ndarray) -> None:
    """Write a plain (P3) pixel map: header, then channel values row-major."""
    height, width, _ = rgb.shape
    _ensure_parent(path)
    with open(path, "w", encoding="ascii") as f:
        f.write("P3\n")
        f.write(f"{width} {height}\n")
        f.write("255\n")
        for row in rgb:
            f.write(" ".join(str(int(v)) for v in row.reshape(-1)))
            f.write("\n")


def write_image(path: str, rgb: np.ndarray) -> str:
    rgb = np.asarray(rgb, dtype=np.uint8)
    if rgb.ndim != 3 or rgb.shape[2] != 3:
        raise ValueError(f"expected an (H, W, 3) array, got shape {rgb.shape}")

    logger = get_logger()
    if path.lower().endswith(".ppm"):
        write_ppm(path, rgb)
    else:
        _ensure_parent(path)
        Image.fromarray(rgb).save(path)
    logger.info("Image written: %s (%sx%s)", path, rgb.shape[1], rgb.shape[0])
    return path
