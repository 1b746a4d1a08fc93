import os
import sys
from pathlib import Path

import pytest
from PIL import Image

sys.path.insert(0, str(Path(__file__).parent.parent))
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from graphics.compositor import AssetLoader
from model.catalog import Catalog
from model.database import StorefrontDB
from model.models import Bracelet, Charm, CharmInstance, SelectionState
from model.store import Store


@pytest.fixture
def gold_chain():
    return Bracelet(id="bracelet-gold", name="Gold Chain", price=30.0,
                    image="bracelets/gold.png", open_image="bracelets/gold_open.png",
                    color="Gold", material="Gold Plated")


@pytest.fixture
def charms():
    return [
        Charm(id="charm-a", name="Anchor", price=5.0, category="Symbols", image="charms/red.png"),
        Charm(id="charm-b", name="Bee", price=7.5, category="Nature", image="charms/red.png"),
        Charm(id="charm-c", name="Cat", price=10.0, category="Nature", tags=("pets",),
              image="charms/red.png", background="backgrounds/blue.png"),
    ]


@pytest.fixture
def make_instances():
    def _make(charms):
        return tuple(CharmInstance(f"inst-{i}", c) for i, c in enumerate(charms))
    return _make


@pytest.fixture
def store(gold_chain):
    return Store(state=SelectionState(bracelet=gold_chain), default_bracelet=gold_chain)


@pytest.fixture
def db(tmp_path):
    database = StorefrontDB(tmp_path / "test.db")
    yield database
    database.close()


@pytest.fixture
def catalog(db, gold_chain, charms):
    db.add_bracelet(gold_chain)
    for c in charms:
        db.add_charm(c)
    return Catalog(db, "/images")


@pytest.fixture
def assets(tmp_path):
    """Tiny asset folder: grey backdrop, solid red charm, blue background."""
    root = tmp_path / "assets"
    (root / "bracelets").mkdir(parents=True)
    (root / "charms").mkdir()
    (root / "backgrounds").mkdir()
    Image.new("RGBA", (800, 350), (128, 128, 128, 255)).save(root / "bracelets" / "gold_open.png")
    Image.new("RGBA", (800, 350), (200, 50, 50, 255)).save(root / "bracelets" / "gold.png")
    Image.new("RGBA", (50, 50), (255, 0, 0, 255)).save(root / "charms" / "red.png")
    Image.new("RGBA", (64, 64), (0, 0, 255, 255)).save(root / "backgrounds" / "blue.png")
    dot = Image.new("RGBA", (100, 100), (0, 0, 0, 0))
    dot.paste((255, 0, 0, 255), (40, 40, 60, 60))
    dot.save(root / "charms" / "dot.png")
    return root


@pytest.fixture
def loader(assets):
    return AssetLoader(assets)
