# graphics/snap_points.py
"""
Static anchor tables for charm placement.

All coordinates live in the preview "design space": 800 wide x 350 high,
(0, 0) at the top-left. Nothing here computes anything; the layout engine
scales these to the real canvas.
"""
from collections import namedtuple

DESIGN_WIDTH = 800
DESIGN_HEIGHT = 350

SnapPoint = namedtuple("SnapPoint", ["x", "y"])

# Per-bracelet overrides. Add/adjust points per bracelet id here.
# e.g. 'bracelet-1': [SnapPoint(0, 80), SnapPoint(100, 140), ...]
BRACELET_SNAP_POINTS = {}

# Fallback points for bracelets without a custom entry
DEFAULT_SNAP_POINTS = [
    SnapPoint(80, 155),   # P1
    SnapPoint(125, 185),  # P1 alt
    SnapPoint(175, 215),  # P2
    SnapPoint(230, 240),  # P2 alt
    SnapPoint(290, 255),  # P3
    SnapPoint(345, 265),  # P3 alt
    SnapPoint(400, 270),  # P4
    SnapPoint(455, 265),  # P5 alt
    SnapPoint(510, 255),  # P5
    SnapPoint(565, 240),  # P6
    SnapPoint(615, 215),  # P6 alt
    SnapPoint(670, 190),  # P7 alt
    SnapPoint(720, 155),  # P7
]

# Slot list per total charm count. Every entry N holds at least N points.
CHARM_LAYOUTS = {
    1: [SnapPoint(320, 200)],
    2: [SnapPoint(210, 170), SnapPoint(430, 170)],
    3: [SnapPoint(100, 140), SnapPoint(320, 200), SnapPoint(540, 140)],
    4: [SnapPoint(100, 140), SnapPoint(245, 195), SnapPoint(395, 195), SnapPoint(540, 140)],
    5: [SnapPoint(80, 130), SnapPoint(200, 180), SnapPoint(320, 200),
        SnapPoint(440, 180), SnapPoint(560, 130)],
    6: [SnapPoint(70, 125), SnapPoint(170, 165), SnapPoint(270, 195),
        SnapPoint(370, 195), SnapPoint(470, 165), SnapPoint(570, 125)],
    7: [SnapPoint(60, 120), SnapPoint(145, 155), SnapPoint(230, 185), SnapPoint(320, 200),
        SnapPoint(410, 185), SnapPoint(495, 155), SnapPoint(580, 120)],
}

# Used when a count has no entry (only count 0 in practice, which draws nothing)
FALLBACK_LAYOUT_COUNT = 5


def get_bracelet_snap_points(bracelet_id):
    """Custom points for this bracelet, or None."""
    if not bracelet_id:
        return None
    return BRACELET_SNAP_POINTS.get(bracelet_id)


def snap_points_for(bracelet_id):
    return get_bracelet_snap_points(bracelet_id) or DEFAULT_SNAP_POINTS


def layout_for_count(count):
    return CHARM_LAYOUTS.get(count, CHARM_LAYOUTS[FALLBACK_LAYOUT_COUNT])
