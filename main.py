# main.py
import logging
import sys

from PyQt5.QtWidgets import QApplication

from graphics.compositor import AssetLoader
from model.catalog import Catalog
from model.database import StorefrontDB
from model.session import SessionPersistence
from model.store import Store
from ui.designer import DesignerWindow
from utils.config import load_config
from utils.paths import ASSETS_DIR

SESSION_ID = "local"

log = logging.getLogger("charm_studio")


def build_app_state(config):
    """Database, catalogue and a store restored from the last session."""
    db = StorefrontDB(config.db_path)
    db.seed_defaults()
    catalog = Catalog(db, config.asset_base_url)

    default_bracelet = catalog.get_bracelet(config.default_bracelet_id)
    if default_bracelet is None:
        log.warning("Default bracelet %s not in catalogue", config.default_bracelet_id)

    store = Store(default_bracelet=default_bracelet)
    SessionPersistence(db, catalog, SESSION_ID, config.cookie_limit).attach(store)
    return db, catalog, store


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s:%(message)s")

    config = load_config()
    db, catalog, store = build_app_state(config)

    app = QApplication(sys.argv)
    window = DesignerWindow(store, catalog, AssetLoader(ASSETS_DIR), config)
    window.added_to_cart.connect(
        lambda line: log.info("Added %s to cart (%d items, %.2f)",
                              line.bracelet.name, len(store.state.cart), store.get_cart_total()))
    window.show()

    code = app.exec_()
    db.close()
    sys.exit(code)
