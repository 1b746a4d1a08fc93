# utils/image_centering.py
import numpy as np
from PIL import Image

# Offsets per source key, so each charm image is scanned once
_offset_cache = {}


def opaque_bbox_center(img, alpha_threshold=8):
    """
    Centre (cx, cy) of the box around pixels with alpha > threshold.
    Returns None for an empty or fully transparent image.
    """
    w, h = img.size
    if not w or not h:
        return None

    alpha = np.asarray(img.convert("RGBA"))[:, :, 3]
    ys, xs = np.nonzero(alpha > alpha_threshold)
    if xs.size == 0:
        return None

    return ((xs.min() + xs.max()) / 2.0, (ys.min() + ys.max()) / 2.0)


def centering_offset(img, box_w, box_h, alpha_threshold=8, cache_key=None):
    """
    (dx, dy) to shift the image, drawn "contain"-fitted into a box_w x box_h box,
    so its visible content sits in the middle of the box. None if nothing is opaque.
    """
    if cache_key is not None and (cache_key, box_w, box_h) in _offset_cache:
        return _offset_cache[(cache_key, box_w, box_h)]

    center = opaque_bbox_center(img, alpha_threshold)
    if center is None:
        return None

    w, h = img.size
    scale = min(box_w / w, box_h / h)
    offset = ((w / 2 - center[0]) * scale, (h / 2 - center[1]) * scale)

    if cache_key is not None:
        _offset_cache[(cache_key, box_w, box_h)] = offset
    return offset


def auto_center(img, alpha_threshold=8):
    """Copy of the image with its opaque content moved to the middle. Same size."""
    center = opaque_bbox_center(img, alpha_threshold)
    rgba = img.convert("RGBA")
    if center is None:
        return rgba

    w, h = rgba.size
    dx = int(round(w / 2 - center[0]))
    dy = int(round(h / 2 - center[1]))
    out = Image.new("RGBA", (w, h), (0, 0, 0, 0))
    out.paste(rgba, (dx, dy), rgba)
    return out


def clear_cache():
    _offset_cache.clear()
