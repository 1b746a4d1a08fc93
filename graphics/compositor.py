# graphics/compositor.py
import io
import logging
from pathlib import Path

from PIL import Image, ImageDraw, ImageOps

from graphics.layout import place_charms
from graphics.snap_points import DESIGN_WIDTH, DESIGN_HEIGHT
from model.checkout import PreviewSource, preview_source
from utils.image_centering import centering_offset
from utils.paths import ASSETS_DIR

log = logging.getLogger(__name__)

CHARM_SCALE = 0.1875   # charm box width as a fraction of canvas width
BG_COLOR = (250, 250, 249, 255)


class AssetLoader:
    """Loads bracelet/charm artwork from the local asset folder, cached per path."""

    def __init__(self, root=ASSETS_DIR):
        self.root = Path(root)
        self._cache = {}

    def load(self, rel_path):
        if not rel_path:
            return None
        if rel_path in self._cache:
            return self._cache[rel_path]

        path = self.root / rel_path.lstrip("/")
        img = None
        try:
            with Image.open(path) as src:
                img = src.convert("RGBA")
        except (OSError, ValueError) as e:
            log.warning("Could not load asset %s: %s", path, e)

        # Misses are cached too, so a missing file is only reported once
        self._cache[rel_path] = img
        return img

    def model_path(self, charm):
        """Local file of the charm's 3D model, or None when it has none on disk."""
        if not charm.model_path:
            return None
        path = self.root / charm.model_path.lstrip("/")
        return str(path) if path.is_file() else None


def _contain(img, box_w, box_h):
    """Scale to fit inside the box, keeping aspect ratio ("object-fit: contain")."""
    w, h = img.size
    scale = min(box_w / w, box_h / h)
    size = (max(1, int(round(w * scale))), max(1, int(round(h * scale))))
    return img.resize(size, Image.LANCZOS)


def _backdrop(bracelet, loader):
    img = loader.load(bracelet.backdrop)
    if img is not None and bracelet.grayscale:
        alpha = img.getchannel("A")
        img = ImageOps.grayscale(img).convert("RGBA")
        img.putalpha(alpha)
    return img


def render_composition(bracelet, charms, loader, width=DESIGN_WIDTH, height=DESIGN_HEIGHT,
                       charm_scale=CHARM_SCALE, positions=None):
    """
    Bracelet backdrop with each charm centred on its slot.
    `positions` (instance_id -> slot) is used when rebuilding a stored design.
    """
    canvas = Image.new("RGBA", (width, height), BG_COLOR)

    # 1. Backdrop, fitted and centred
    backdrop = _backdrop(bracelet, loader)
    if backdrop is not None:
        fitted = _contain(backdrop, width, height)
        canvas.alpha_composite(fitted, ((width - fitted.width) // 2, (height - fitted.height) // 2))

    # 2. Charms, square boxes centred on their slot
    box = max(1, int(round(width * charm_scale)))
    for placed in place_charms(charms, width, height, bracelet.id, positions):
        charm = placed.instance.charm
        art = loader.load(charm.image)
        if art is None:
            continue
        fitted = _contain(art, box, box)
        dx, dy = centering_offset(art, box, box, cache_key=charm.image) or (0.0, 0.0)
        left = int(round(placed.x - fitted.width / 2 + dx))
        top = int(round(placed.y - fitted.height / 2 + dy))
        # alpha_composite rejects negative offsets, paste does not
        canvas.paste(fitted, (left, top), fitted)

    return canvas


def render_placeholder(width=DESIGN_WIDTH, height=DESIGN_HEIGHT):
    img = Image.new("RGBA", (width, height), BG_COLOR)
    draw = ImageDraw.Draw(img)
    s = min(width, height) // 6
    cx, cy = width // 2, height // 2
    draw.rectangle([cx - s, cy - s, cx + s, cy + s], outline=(214, 211, 209, 255), width=3)
    draw.line([cx - s, cy - s // 3, cx + s, cy - s // 3], fill=(214, 211, 209, 255), width=3)
    return img


def to_png(img):
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def render_preview_png(state, loader, width=DESIGN_WIDTH, height=DESIGN_HEIGHT, charm_scale=CHARM_SCALE):
    """PNG of the live design for a cart snapshot. None without a bracelet."""
    if state.bracelet is None:
        return None
    return to_png(render_composition(state.bracelet, state.charms, loader, width, height, charm_scale))


def render_line_preview(line, loader, preview_image=None, width=DESIGN_WIDTH, height=DESIGN_HEIGHT,
                        charm_scale=CHARM_SCALE):
    """
    Order history preview for one line: stored bitmap, else overlay rebuilt from
    stored positions, else the bare bracelet, else a placeholder.
    Returns (PreviewSource, Image).
    """
    source = preview_source(line, preview_image)

    if source == PreviewSource.IMAGE:
        try:
            with Image.open(io.BytesIO(preview_image)) as src:
                return source, src.convert("RGBA")
        except (OSError, ValueError) as e:
            log.warning("Stored preview unreadable, rebuilding: %s", e)
            source = preview_source(line, None)

    if source == PreviewSource.OVERLAY:
        return source, render_composition(line.bracelet, line.charms, loader, width, height,
                                          charm_scale, positions=line.charm_positions)
    if source == PreviewSource.BACKDROP:
        return source, render_composition(line.bracelet, (), loader, width, height, charm_scale)
    return PreviewSource.PLACEHOLDER, render_placeholder(width, height)


def render_charm_tile(charm, loader, size=96, show_background=True):
    """Square catalogue tile: optional decorative background under the charm art."""
    tile = Image.new("RGBA", (size, size), (0, 0, 0, 0))
    if show_background and charm.background:
        bg = loader.load(charm.background)
        if bg is not None:
            tile.alpha_composite(ImageOps.fit(bg, (size, size)))

    art = loader.load(charm.image)
    if art is not None:
        fitted = _contain(art, size, size)
        dx, dy = centering_offset(art, size, size, cache_key=charm.image) or (0.0, 0.0)
        tile.paste(fitted, (int(round((size - fitted.width) / 2 + dx)),
                            int(round((size - fitted.height) / 2 + dy))), fitted)
    return tile
