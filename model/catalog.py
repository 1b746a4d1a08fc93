# model/catalog.py
import logging
import sqlite3

log = logging.getLogger(__name__)

ALL_CATEGORIES = "All"
PLACEHOLDER_IMAGE = "placeholder.png"


class Catalog:
    """
    Read-only view of bracelets and charms.
    Lookups fail soft: a database error is logged and yields [] / None.
    """

    def __init__(self, db, asset_base_url="/images"):
        self.db = db
        self.asset_base_url = asset_base_url.rstrip("/")

    def list_bracelets(self):
        try:
            return self.db.get_all_bracelets()
        except sqlite3.Error as e:
            log.error(" [DB] Error fetching bracelets: %s", e)
            return []

    def list_charms(self):
        try:
            return self.db.get_all_charms()
        except sqlite3.Error as e:
            log.error(" [DB] Error fetching charms: %s", e)
            return []

    def charms_by_category(self, category):
        if not category or category == ALL_CATEGORIES:
            return self.list_charms()
        try:
            return self.db.get_all_charms(category=category)
        except sqlite3.Error as e:
            log.error(" [DB] Error fetching charms for %s: %s", category, e)
            return []

    def list_charm_categories(self):
        try:
            return [ALL_CATEGORIES] + self.db.get_categories()
        except sqlite3.Error as e:
            log.error(" [DB] Error fetching charm categories: %s", e)
            return [ALL_CATEGORIES]

    def get_bracelet(self, bracelet_id):
        try:
            return self.db.get_bracelet(bracelet_id)
        except sqlite3.Error as e:
            log.error(" [DB] Error fetching bracelet %s: %s", bracelet_id, e)
            return None

    def get_charm(self, charm_id):
        try:
            return self.db.get_charm(charm_id)
        except sqlite3.Error as e:
            log.error(" [DB] Error fetching charm %s: %s", charm_id, e)
            return None

    # --- Asset URLs ---
    def _url(self, rel_path):
        if rel_path.startswith(("http://", "https://", "/")):
            return rel_path
        return f"{self.asset_base_url}/{rel_path}"

    def get_charm_image_url(self, charm):
        return self._url(charm.image or PLACEHOLDER_IMAGE)

    def get_charm_background_url(self, charm):
        return self._url(charm.background) if charm.background else None

    def get_charm_model_url(self, charm):
        return self._url(charm.model_path) if charm.model_path else None

    def get_bracelet_image_url(self, bracelet, open_chain=False):
        return self._url(bracelet.backdrop if open_chain else bracelet.image)
