# utils/config.py
import json
import logging
from dataclasses import dataclass, fields

from utils.paths import CONFIG_PATH, DB_PATH

log = logging.getLogger(__name__)

DEFAULTS = {
    "db_path": str(DB_PATH),
    "asset_base_url": "/images",
    "render_width": 800,
    "render_height": 350,
    "zoom_min": 1.0,
    "zoom_max": 3.0,
    "zoom_step": 0.15,
    "cookie_limit": 4096,      # bytes, typical browser cookie ceiling
    "default_bracelet_id": "bracelet-2",
    "charm_scale": 0.1875,     # charm box width / canvas width
}


@dataclass(frozen=True)
class StoreConfig:
    db_path: str
    asset_base_url: str
    render_width: int
    render_height: int
    zoom_min: float
    zoom_max: float
    zoom_step: float
    cookie_limit: int
    default_bracelet_id: str
    charm_scale: float


def load_config(path=CONFIG_PATH):
    """Reads config.json on top of DEFAULTS. Missing or broken files fall back to defaults."""
    values = dict(DEFAULTS)

    try:
        with open(path, "r", encoding="utf-8") as fh:
            overrides = json.load(fh)
    except FileNotFoundError:
        overrides = {}
    except (OSError, ValueError) as e:
        log.error(" [Config] Could not read %s, using defaults: %s", path, e)
        overrides = {}

    if not isinstance(overrides, dict):
        log.error(" [Config] %s must hold a JSON object, using defaults.", path)
        overrides = {}

    for key, value in overrides.items():
        if key not in DEFAULTS:
            log.warning(" [Config] Ignoring unknown key '%s'", key)
            continue
        values[key] = value

    # Coerce to the declared field types so "2" from a hand-edited file still works
    casts = {f.name: type(DEFAULTS[f.name]) for f in fields(StoreConfig)}
    for key, cast in casts.items():
        try:
            values[key] = cast(values[key])
        except (TypeError, ValueError):
            log.warning(" [Config] Bad value for '%s': %r, using default", key, values[key])
            values[key] = DEFAULTS[key]

    return StoreConfig(**values)
