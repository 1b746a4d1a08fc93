# model/database.py
import json
import logging
import os
import sqlite3
import uuid
from datetime import datetime

from model.errors import PersistenceError
from model.models import (Bracelet, Charm, Order, OrderCharm, OrderLine, OrderStatus)
from utils.paths import DB_PATH

log = logging.getLogger(__name__)

# Seed data: the default gold chain used when nothing else is selected
DEFAULT_BRACELETS = [
    Bracelet(
        id="bracelet-2",
        name="Gold Plated Chain",
        description="Luxurious gold-plated chain with timeless appeal",
        price=34.99,
        image="bracelets/bracelet_gold.png",
        open_image="bracelets/bracelet_open.png",
        color="Gold",
        material="Gold Plated",
    ),
    Bracelet(
        id="bracelet-1",
        name="Sterling Silver Chain",
        description="Classic sterling silver link chain",
        price=29.99,
        image="bracelets/bracelet_silver.png",
        open_image="bracelets/bracelet_open.png",
        color="Silver",
        material="Sterling Silver",
        grayscale=True,
    ),
]

DEFAULT_CHARMS = [
    Charm(id="charm-heart", name="Heart", price=9.99, category="Symbols", tags=("love",),
          image="charms/heart.png"),
    Charm(id="charm-star", name="Star", price=8.99, category="Symbols", tags=("sky",),
          image="charms/star.png"),
    Charm(id="charm-clover", name="Four Leaf Clover", price=11.99, category="Nature", tags=("luck",),
          image="charms/clover.png", background="backgrounds/meadow.png"),
    Charm(id="charm-moon", name="Crescent Moon", price=10.49, category="Nature", tags=("sky", "night"),
          image="charms/moon.png", model_path="models/moon.glb"),
]


class StorefrontDB:
    def __init__(self, db_path=DB_PATH):
        self.db_path = str(db_path)
        self.conn = None
        self._init_db()

    def _init_db(self):
        """Creates the tables if they are missing."""
        if self.db_path != ":memory:":
            os.makedirs(os.path.dirname(os.path.abspath(self.db_path)), exist_ok=True)
        self.conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        cursor = self.conn.cursor()

        cursor.execute('''
            CREATE TABLE IF NOT EXISTS bracelets (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                price REAL NOT NULL,
                image TEXT NOT NULL,
                open_image TEXT,
                description TEXT DEFAULT '',
                color TEXT DEFAULT '',
                material TEXT DEFAULT '',
                grayscale INTEGER DEFAULT 0
            )
        ''')
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS charms (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                price REAL NOT NULL,
                category TEXT DEFAULT '',
                tags TEXT,            -- JSON list
                image TEXT,
                model_path TEXT,
                background TEXT,
                description TEXT DEFAULT ''
            )
        ''')
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS orders (
                id TEXT PRIMARY KEY,
                user_id TEXT NOT NULL,
                items TEXT NOT NULL,  -- JSON snapshot of ids only
                preview_image BLOB,
                total_amount REAL NOT NULL,
                status TEXT NOT NULL DEFAULT 'pending',
                created_at TEXT NOT NULL
            )
        ''')
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS sessions (
                session_id TEXT PRIMARY KEY,
                payload TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
        ''')
        self.conn.commit()

    def seed_defaults(self):
        """Adds the default chain and a few charms if the catalogue is empty."""
        if self.get_all_bracelets():
            return
        log.info(" [DB] Catalogue empty. Seeding default items...")
        for b in DEFAULT_BRACELETS:
            self.add_bracelet(b)
        for c in DEFAULT_CHARMS:
            self.add_charm(c)

    # --- Reference data ---
    def add_bracelet(self, bracelet):
        self.conn.execute('''
            INSERT OR REPLACE INTO bracelets
                (id, name, price, image, open_image, description, color, material, grayscale)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        ''', (bracelet.id, bracelet.name, bracelet.price, bracelet.image, bracelet.open_image,
              bracelet.description, bracelet.color, bracelet.material, int(bracelet.grayscale)))
        self.conn.commit()

    def add_charm(self, charm):
        self.conn.execute('''
            INSERT OR REPLACE INTO charms
                (id, name, price, category, tags, image, model_path, background, description)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        ''', (charm.id, charm.name, charm.price, charm.category, json.dumps(list(charm.tags)),
              charm.image, charm.model_path, charm.background, charm.description))
        self.conn.commit()

    def delete_charm(self, charm_id):
        self.conn.execute("DELETE FROM charms WHERE id = ?", (charm_id,))
        self.conn.commit()

    def get_all_bracelets(self):
        rows = self.conn.execute('SELECT * FROM bracelets ORDER BY name').fetchall()
        return [self._row_to_bracelet(r) for r in rows]

    def get_bracelet(self, bracelet_id):
        row = self.conn.execute('SELECT * FROM bracelets WHERE id = ?', (bracelet_id,)).fetchone()
        return self._row_to_bracelet(row) if row else None

    def get_all_charms(self, category=None):
        if category:
            rows = self.conn.execute(
                'SELECT * FROM charms WHERE category = ? ORDER BY name', (category,)).fetchall()
        else:
            rows = self.conn.execute('SELECT * FROM charms ORDER BY name').fetchall()
        return [self._row_to_charm(r) for r in rows]

    def get_charm(self, charm_id):
        row = self.conn.execute('SELECT * FROM charms WHERE id = ?', (charm_id,)).fetchone()
        return self._row_to_charm(row) if row else None

    def get_categories(self):
        rows = self.conn.execute(
            "SELECT DISTINCT category FROM charms WHERE category != '' ORDER BY category").fetchall()
        return [r["category"] for r in rows]

    @staticmethod
    def _row_to_bracelet(row):
        return Bracelet(
            id=row["id"], name=row["name"], price=row["price"], image=row["image"],
            open_image=row["open_image"], description=row["description"] or "",
            color=row["color"] or "", material=row["material"] or "",
            grayscale=bool(row["grayscale"]),
        )

    @staticmethod
    def _row_to_charm(row):
        tags = tuple(json.loads(row["tags"])) if row["tags"] else ()
        return Charm(
            id=row["id"], name=row["name"], price=row["price"], category=row["category"] or "",
            tags=tags, image=row["image"], model_path=row["model_path"],
            background=row["background"], description=row["description"] or "",
        )

    # --- Orders ---
    def insert_order(self, order):
        """Writes one order row and returns its id. Raises PersistenceError on failure."""
        order_id = order.id or str(uuid.uuid4())
        items = [
            {
                "id": line.line_id,
                "bracelet_id": line.bracelet_id,
                "charms": [{"instance_id": c.instance_id, "charm_id": c.charm_id} for c in line.charms],
                "positions": line.positions,
            }
            for line in order.items
        ]
        try:
            self.conn.execute('''
                INSERT INTO orders (id, user_id, items, preview_image, total_amount, status, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
            ''', (order_id, order.user_id, json.dumps(items), order.preview_image,
                  order.total_amount, OrderStatus(order.status).value, order.created_at.isoformat()))
            self.conn.commit()
        except sqlite3.Error as e:
            self.conn.rollback()
            raise PersistenceError(f"Could not insert order for {order.user_id}: {e}") from e
        return order_id

    def get_orders_for_user(self, user_id):
        rows = self.conn.execute(
            'SELECT * FROM orders WHERE user_id = ? ORDER BY created_at DESC', (user_id,)).fetchall()
        return [self._row_to_order(r) for r in rows]

    def get_order(self, order_id):
        row = self.conn.execute('SELECT * FROM orders WHERE id = ?', (order_id,)).fetchone()
        return self._row_to_order(row) if row else None

    def update_order_status(self, order_id, status):
        """Status moves are driven from outside the storefront (fulfilment)."""
        cursor = self.conn.execute(
            'UPDATE orders SET status = ? WHERE id = ?', (OrderStatus(status).value, order_id))
        self.conn.commit()
        return cursor.rowcount > 0

    @staticmethod
    def _row_to_order(row):
        lines = []
        for it in json.loads(row["items"]):
            lines.append(OrderLine(
                line_id=it.get("id") or "",
                bracelet_id=it["bracelet_id"],
                charms=tuple(OrderCharm(c["instance_id"], c["charm_id"]) for c in it.get("charms", [])),
                positions=it.get("positions") or None,
            ))
        return Order(
            id=row["id"],
            user_id=row["user_id"],
            items=tuple(lines),
            total_amount=row["total_amount"],
            status=OrderStatus(row["status"]),
            preview_image=row["preview_image"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    # --- Sessions (durable selection blob, last write wins) ---
    def save_session(self, session_id, payload):
        self.conn.execute('''
            INSERT OR REPLACE INTO sessions (session_id, payload, updated_at)
            VALUES (?, ?, datetime('now'))
        ''', (session_id, payload))
        self.conn.commit()

    def load_session(self, session_id):
        row = self.conn.execute(
            'SELECT payload FROM sessions WHERE session_id = ?', (session_id,)).fetchone()
        return row["payload"] if row else None

    def close(self):
        if self.conn:
            self.conn.close()
