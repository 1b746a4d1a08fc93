import json
from dataclasses import replace

import pytest
import trimesh

pytest.importorskip("PyQt5")

from PyQt5.QtCore import QEvent, QPointF, Qt
from PyQt5.QtGui import QMouseEvent
from PyQt5.QtWidgets import QApplication

from graphics.compositor import AssetLoader
from model.models import MAX_CHARMS
from ui import designer as designer_module
from ui.designer import DesignerWindow
from ui.preview_canvas import PreviewCanvas
from ui.ring_view import RingView
from utils.config import load_config


@pytest.fixture(scope="module")
def qapp():
    app = QApplication.instance() or QApplication([])
    yield app


def _mouse(kind, x, y, buttons=Qt.LeftButton):
    return QMouseEvent(kind, QPointF(x, y), Qt.LeftButton, buttons, Qt.NoModifier)


@pytest.fixture
def canvas(qapp, store, loader, charms):
    for c in charms:
        store.add_charm(c)
    widget = PreviewCanvas(store, loader)
    widget.resize(800, 350)
    widget.viewport.resize(800, 350)
    yield widget
    widget.detach()


def test_drag_charm_to_another_slot(canvas, store):
    a, b, c = store.state.charms
    moved = []
    canvas.charm_moved.connect(lambda iid, slot: moved.append((iid, slot)))

    canvas.mousePressEvent(_mouse(QEvent.MouseButtonPress, 100, 140))
    canvas.mouseMoveEvent(_mouse(QEvent.MouseMove, 530, 150))
    canvas.mouseReleaseEvent(_mouse(QEvent.MouseButtonRelease, 530, 150, Qt.NoButton))

    assert store.state.charms == (c, b, a)
    assert moved == [(a.instance_id, 2)]


def test_press_on_empty_space_does_nothing(canvas, store):
    before = store.state
    canvas.mousePressEvent(_mouse(QEvent.MouseButtonPress, 320, 20))
    canvas.mouseReleaseEvent(_mouse(QEvent.MouseButtonRelease, 320, 20, Qt.NoButton))
    assert store.state is before


def test_drag_pans_when_zoomed(canvas, store):
    before = store.state
    for _ in range(7):
        canvas.zoom_in()

    canvas.mousePressEvent(_mouse(QEvent.MouseButtonPress, 100, 140))
    assert canvas.viewport.dragging
    canvas.mouseMoveEvent(_mouse(QEvent.MouseMove, 160, 120))
    canvas.mouseReleaseEvent(_mouse(QEvent.MouseButtonRelease, 160, 120, Qt.NoButton))

    assert canvas.viewport.pan == (60.0, -20.0)
    assert store.state is before

    canvas.reset_zoom()
    assert canvas.viewport.state() == (1.0, (0.0, 0.0))


def test_canvas_paints_offscreen(canvas):
    assert not canvas.grab().isNull()


def test_designer_reports_charm_limit(qapp, monkeypatch, store, catalog, loader, tmp_path):
    notices = []
    monkeypatch.setattr(designer_module.QMessageBox, "information",
                        lambda *args: notices.append(args[1]))
    window = DesignerWindow(store, catalog, loader, load_config(tmp_path / "none.json"))

    item = window.lst_charms.item(0)
    for _ in range(MAX_CHARMS + 1):
        window.on_charm_chosen(item)

    assert len(store.state.charms) == MAX_CHARMS
    assert notices == ["Limit reached"]
    assert window.lbl_count.text() == f"{MAX_CHARMS}/{MAX_CHARMS} charms"
    window.close()


def test_designer_add_to_cart_renders_preview(qapp, store, catalog, loader, tmp_path):
    window = DesignerWindow(store, catalog, loader, load_config(tmp_path / "none.json"))
    added = []
    window.added_to_cart.connect(added.append)

    window.on_charm_chosen(window.lst_charms.item(0))
    window.add_to_cart()

    assert len(added) == 1
    assert added[0].preview_image.startswith(b"\x89PNG")
    assert window.lst_selected.count() == 0
    window.close()


def test_configured_zoom_limit_caps_the_canvas(qapp, store, loader, tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"zoom_max": 2.0}))
    config = load_config(path)

    widget = PreviewCanvas(store, loader, config)
    for _ in range(20):
        widget.zoom_in()
    assert widget.viewport.zoom == pytest.approx(2.0)
    widget.detach()


def test_designer_canvas_uses_config(qapp, store, catalog, loader, tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"zoom_max": 1.5}))
    window = DesignerWindow(store, catalog, loader, load_config(path))

    for _ in range(20):
        window.canvas.zoom_in()
    assert window.canvas.viewport.zoom == pytest.approx(1.5)
    window.close()


def test_designer_switches_to_3d_view(qapp, store, catalog, loader, tmp_path):
    window = DesignerWindow(store, catalog, loader, load_config(tmp_path / "none.json"))
    window.on_charm_chosen(window.lst_charms.item(0))
    window.on_charm_chosen(window.lst_charms.item(1))

    window.chk_3d.setChecked(True)
    assert window.canvas.isHidden()
    assert not window.ring_view.isHidden()
    assert window.ring_view.timer.isActive()
    assert len(window.ring_view.nodes) == 2
    assert all(node.mesh is None for node in window.ring_view.nodes)
    assert not window.ring_view.grab().isNull()

    window.chk_3d.setChecked(False)
    assert not window.canvas.isHidden()
    assert not window.ring_view.timer.isActive()
    window.close()


def test_ring_view_draws_charm_models(qapp, store, assets, charms):
    (assets / "models").mkdir()
    trimesh.creation.box(extents=(1.0, 1.0, 1.0)).export(str(assets / "models" / "box.obj"))
    loader = AssetLoader(assets)
    store.add_charm(replace(charms[0], model_path="models/box.obj"))
    store.add_charm(charms[1])

    view = RingView(store, loader.model_path)
    view.resize(400, 175)

    assert view.nodes[0].mesh is not None
    assert view.nodes[1].mesh is None
    view.rotate(90)
    assert view.angle == 90
    assert not view.grab().isNull()
    view.detach()
