# graphics/viewport.py
import math
from collections import namedtuple

from graphics.snap_points import DESIGN_WIDTH, DESIGN_HEIGHT

MIN_ZOOM = 1.0
MAX_ZOOM = 3.0
ZOOM_STEP = 0.15
# Float slack so 1.0000001 after a pinch still counts as "not zoomed"
EPS = 1e-4

ViewState = namedtuple("ViewState", ["zoom", "pan"])


class ViewportController:
    """
    Pan/zoom state of the preview.

    Zoom is applied around the viewport centre, pan in screen pixels on top
    of it. Pan is always clamped so the scaled canvas never shows its edges.
    Pure interaction state: nothing is persisted.
    """

    def __init__(self, width=DESIGN_WIDTH, height=DESIGN_HEIGHT,
                 min_zoom=MIN_ZOOM, max_zoom=MAX_ZOOM, step=ZOOM_STEP):
        self.width = float(width)
        self.height = float(height)
        self.min_zoom = min_zoom
        self.max_zoom = max_zoom
        self.step = step

        self.zoom = min_zoom
        self.pan_x = 0.0
        self.pan_y = 0.0

        # Gesture state
        self.dragging = False
        self._drag_start = None   # pointer - pan, captured on press
        self._pinch = None        # (initial_distance, initial_zoom)

    @classmethod
    def from_config(cls, cfg):
        return cls(cfg.render_width, cfg.render_height, cfg.zoom_min, cfg.zoom_max, cfg.zoom_step)

    # --- Queries ---
    @property
    def can_pan(self):
        return self.zoom > 1.0 + EPS

    @property
    def can_drag_charms(self):
        return self.zoom <= 1.0 + EPS

    @property
    def pan(self):
        return (self.pan_x, self.pan_y)

    def state(self):
        return ViewState(self.zoom, self.pan)

    def max_pan(self, zoom=None):
        z = self.zoom if zoom is None else zoom
        return (self.width * (z - 1) / 2, self.height * (z - 1) / 2)

    # --- Clamping ---
    def clamp_zoom(self, z):
        return max(self.min_zoom, min(self.max_zoom, z))

    def clamp_pan(self, x, y, zoom=None):
        z = self.zoom if zoom is None else zoom
        if z <= 1.0 + EPS:
            return (0.0, 0.0)
        max_x, max_y = self.max_pan(z)
        return (max(-max_x, min(max_x, x)), max(-max_y, min(max_y, y)))

    def set_pan(self, x, y):
        self.pan_x, self.pan_y = self.clamp_pan(x, y)
        return self.pan

    def set_zoom(self, z):
        self.zoom = self.clamp_zoom(z)
        # Re-clamp straight away so a zoom-out never leaves the view off-canvas
        self.pan_x, self.pan_y = self.clamp_pan(self.pan_x, self.pan_y)
        return self.zoom

    def resize(self, width, height):
        self.width, self.height = float(width), float(height)
        self.pan_x, self.pan_y = self.clamp_pan(self.pan_x, self.pan_y)

    # --- Buttons / wheel ---
    def zoom_in(self):
        return self.set_zoom(self.zoom + self.step)

    def zoom_out(self):
        return self.set_zoom(self.zoom - self.step)

    def wheel(self, delta_y):
        """Scrolling down (positive delta) zooms out, like the browser preview."""
        if delta_y == 0:
            return self.zoom
        return self.zoom_out() if delta_y > 0 else self.zoom_in()

    def reset(self):
        self.zoom = 1.0
        self.pan_x = self.pan_y = 0.0
        self.dragging = False
        self._drag_start = None
        self._pinch = None
        return self.state()

    # --- Drag ---
    def begin_drag(self, px, py):
        if not self.can_pan:
            return False
        self.dragging = True
        self._drag_start = (px - self.pan_x, py - self.pan_y)
        return True

    def drag_to(self, px, py):
        if not self.dragging or not self.can_pan:
            return self.pan
        sx, sy = self._drag_start
        return self.set_pan(px - sx, py - sy)

    def end_drag(self):
        self.dragging = False
        self._drag_start = None

    # --- Pinch ---
    @staticmethod
    def touch_distance(p1, p2):
        return math.hypot(p1[0] - p2[0], p1[1] - p2[1])

    def begin_pinch(self, p1, p2):
        distance = self.touch_distance(p1, p2)
        if distance <= 0:
            return False
        self._pinch = (distance, self.zoom)
        return True

    def pinch_to(self, p1, p2):
        if self._pinch is None:
            return self.zoom
        initial_distance, initial_zoom = self._pinch
        return self.set_zoom(initial_zoom * self.touch_distance(p1, p2) / initial_distance)

    def end_pinch(self):
        self._pinch = None

    @property
    def pinching(self):
        return self._pinch is not None

    def touches_changed(self, remaining, anchor=None):
        """
        Touch-end bookkeeping: all fingers up ends everything, one left ends the pinch.
        `anchor` is the finger still down; the pan carries on from there instead of
        from where the drag started before the pinch.
        """
        if remaining == 0:
            self.end_drag()
            self.end_pinch()
        elif remaining == 1 and self._pinch is not None:
            self.end_pinch()
            self.end_drag()
            if anchor is not None:
                self.begin_drag(anchor[0], anchor[1])

    # --- Coordinate mapping ---
    def to_screen(self, x, y):
        """Canvas pixel -> screen pixel (zoom about the centre, then pan)."""
        cx, cy = self.width / 2, self.height / 2
        return (cx + (x - cx) * self.zoom + self.pan_x,
                cy + (y - cy) * self.zoom + self.pan_y)

    def screen_to_design(self, px, py):
        """Screen pixel -> 800x350 design space, undoing pan then zoom."""
        if self.width <= 0 or self.height <= 0:
            return None
        sx, sy = px - self.pan_x, py - self.pan_y
        cx, cy = self.width / 2, self.height / 2
        ox = cx + (sx - cx) / self.zoom
        oy = cy + (sy - cy) / self.zoom
        return (ox / self.width * DESIGN_WIDTH, oy / self.height * DESIGN_HEIGHT)
