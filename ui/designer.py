# ui/designer.py
from PyQt5.QtWidgets import (QWidget, QVBoxLayout, QHBoxLayout, QLabel, QPushButton,
                             QListWidget, QListWidgetItem, QComboBox, QMessageBox, QCheckBox)
from PyQt5.QtCore import Qt, pyqtSignal
from PyQt5.QtGui import QPixmap, QImage, QIcon

from graphics.compositor import render_charm_tile, render_preview_png
from model.models import MAX_CHARMS
from model.store import charm_limit_reached
from ui.preview_canvas import PreviewCanvas
from ui.ring_view import RingView


def _icon(img):
    data = img.tobytes("raw", "RGBA")
    qimg = QImage(data, img.width, img.height, img.width * 4, QImage.Format_RGBA8888).copy()
    return QIcon(QPixmap.fromImage(qimg))


class DesignerWindow(QWidget):
    """Charm picker + live preview + cart button for one bracelet design."""
    added_to_cart = pyqtSignal(object)  # CartLineItem

    def __init__(self, store, catalog, loader, config):
        super().__init__()
        self.store = store
        self.catalog = catalog
        self.loader = loader
        self.config = config
        self.setWindowTitle("Charm Studio")
        self.resize(1280, 720)

        layout = QHBoxLayout(self)

        # Left: category filter + charm list
        left = QVBoxLayout()
        self.cmb_category = QComboBox()
        self.cmb_category.addItems(catalog.list_charm_categories())
        self.cmb_category.currentTextChanged.connect(self.refresh_charms)
        left.addWidget(self.cmb_category)

        self.lst_charms = QListWidget()
        self.lst_charms.itemDoubleClicked.connect(self.on_charm_chosen)
        left.addWidget(self.lst_charms)
        layout.addLayout(left, stretch=1)

        # Right: preview, zoom controls, selected charms, totals
        right = QVBoxLayout()
        self.canvas = PreviewCanvas(store, loader, config)
        right.addWidget(self.canvas, stretch=3)
        self.ring_view = RingView(store, loader.model_path)
        self.ring_view.hide()
        right.addWidget(self.ring_view, stretch=3)

        h_zoom = QHBoxLayout()
        for text, slot in (("−", self.canvas.zoom_out), ("+", self.canvas.zoom_in),
                           ("Reset", self.canvas.reset_zoom)):
            btn = QPushButton(text); btn.clicked.connect(slot); h_zoom.addWidget(btn)
        self.chk_3d = QCheckBox("3D view")
        self.chk_3d.toggled.connect(self.toggle_3d)
        h_zoom.addWidget(self.chk_3d)
        h_zoom.addStretch()
        self.lbl_count = QLabel()
        h_zoom.addWidget(self.lbl_count)
        right.addLayout(h_zoom)

        self.lst_selected = QListWidget()
        self.lst_selected.setMaximumHeight(120)
        self.lst_selected.itemDoubleClicked.connect(self.on_selected_removed)
        right.addWidget(self.lst_selected)

        h_total = QHBoxLayout()
        self.lbl_total = QLabel()
        h_total.addWidget(self.lbl_total)
        h_total.addStretch()
        self.btn_cart = QPushButton("Add to cart")
        self.btn_cart.clicked.connect(self.add_to_cart)
        h_total.addWidget(self.btn_cart)
        right.addLayout(h_total)
        layout.addLayout(right, stretch=3)

        self._unsubscribe = store.subscribe(lambda _s: self.refresh_selection())
        self.refresh_charms()
        self.refresh_selection()

    def refresh_charms(self, category=None):
        self.lst_charms.clear()
        show_bg = self.store.state.show_charm_backgrounds
        for charm in self.catalog.charms_by_category(category or self.cmb_category.currentText()):
            item = QListWidgetItem(f"{charm.name}  ${charm.price:.2f}")
            item.setIcon(_icon(render_charm_tile(charm, self.loader, 48, show_bg)))
            item.setData(Qt.UserRole, charm)
            self.lst_charms.addItem(item)

    def refresh_selection(self):
        state = self.store.state
        self.lst_selected.clear()
        for ci in state.charms:
            item = QListWidgetItem(ci.charm.name)
            item.setData(Qt.UserRole, ci.instance_id)
            self.lst_selected.addItem(item)
        self.lbl_count.setText(f"{len(state.charms)}/{MAX_CHARMS} charms")
        self.lbl_total.setText(f"Total: ${self.store.get_total_price():.2f}")
        self.btn_cart.setEnabled(state.bracelet is not None)

    def on_charm_chosen(self, item):
        # The store ignores adds over the cap, so the limit is reported here
        if charm_limit_reached(self.store.state):
            QMessageBox.information(self, "Limit reached", f"A bracelet holds at most {MAX_CHARMS} charms.")
            return
        self.store.add_charm(item.data(Qt.UserRole))

    def on_selected_removed(self, item):
        self.store.remove_charm(item.data(Qt.UserRole))

    def add_to_cart(self):
        preview = render_preview_png(self.store.state, self.loader,
                                     self.config.render_width, self.config.render_height,
                                     self.config.charm_scale)
        line = self.store.add_to_cart(preview_image=preview)
        if line is not None:
            self.canvas.reset_zoom()
            self.added_to_cart.emit(line)

    def toggle_3d(self, on):
        self.canvas.setVisible(not on)
        self.ring_view.setVisible(on)
        self.ring_view.set_spinning(on)

    def closeEvent(self, event):
        self._unsubscribe()
        self.canvas.detach()
        self.ring_view.detach()
        event.accept()
