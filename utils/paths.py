from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

DATA_DIR = BASE_DIR / "data"
ASSETS_DIR = DATA_DIR / "assets"
DB_PATH = DATA_DIR / "storefront.db"
CONFIG_PATH = DATA_DIR / "config.json"
