# ui/preview_canvas.py
from PyQt5.QtWidgets import QWidget
from PyQt5.QtCore import Qt, QEvent, QPointF, QRectF, pyqtSignal
from PyQt5.QtGui import QPainter, QPixmap, QColor, QPen, QImage

from graphics.compositor import CHARM_SCALE
from graphics.layout import charm_at, layout_points, place_charms, slot_at
from graphics.snap_points import DESIGN_WIDTH, DESIGN_HEIGHT
from graphics.viewport import ViewportController


class PreviewCanvas(QWidget):
    """
    Live bracelet preview. Layout comes from the store on every paint; the
    viewport transform (zoom about the centre, then pan) is applied on top.
    At zoom 1 a press on a charm drags it to another slot, above zoom 1 a
    press pans the view.
    """
    charm_moved = pyqtSignal(str, int)   # instance_id, slot

    def __init__(self, store, loader, config=None, parent=None):
        super().__init__(parent)
        self.store = store
        self.loader = loader
        self.viewport = ViewportController.from_config(config) if config else ViewportController()
        self.viewport.resize(self.width(), self.height())

        self._pixmaps = {}
        self._drag_charm = None     # instance id being dragged
        self._drag_offset = (0.0, 0.0)   # pointer - slot, in design space
        self._hover_slot = None

        self.setMinimumSize(400, 175)
        self.setAttribute(Qt.WA_AcceptTouchEvents, True)
        self.setMouseTracking(False)
        self._unsubscribe = store.subscribe(lambda _s: self.update())

    # --- Helpers ---
    def _pixmap(self, rel_path, grayscale=False):
        key = (rel_path, grayscale)
        if key not in self._pixmaps:
            img = self.loader.load(rel_path)
            pix = None
            if img is not None:
                data = img.tobytes("raw", "RGBA")
                qimg = QImage(data, img.width, img.height, img.width * 4, QImage.Format_RGBA8888).copy()
                if grayscale:
                    qimg = qimg.convertToFormat(QImage.Format_Grayscale8)
                pix = QPixmap.fromImage(qimg)
            self._pixmaps[key] = pix
        return self._pixmaps[key]

    def _design_point(self, pos):
        return self.viewport.screen_to_design(pos.x(), pos.y())

    def _current_slots(self):
        state = self.store.state
        bracelet_id = state.bracelet.id if state.bracelet else None
        return layout_points(len(state.charms), bracelet_id)[:len(state.charms)]

    # --- Public slots ---
    def zoom_in(self):
        self.viewport.zoom_in(); self.update()

    def zoom_out(self):
        self.viewport.zoom_out(); self.update()

    def reset_zoom(self):
        self.viewport.reset(); self.update()

    def detach(self):
        self._unsubscribe()

    # --- Qt events ---
    def resizeEvent(self, event):
        super().resizeEvent(event)
        self.viewport.resize(self.width(), self.height())

    def paintEvent(self, event):
        p = QPainter(self)
        p.setRenderHint(QPainter.SmoothPixmapTransform)
        p.fillRect(self.rect(), QColor("#FAFAF9"))

        state = self.store.state
        if state.bracelet is None:
            p.setPen(QColor("#9CA3AF"))
            p.drawText(self.rect(), Qt.AlignCenter, "Select a bracelet to see preview")
            return

        w, h = self.width(), self.height()
        vp = self.viewport
        p.translate(vp.pan_x, vp.pan_y)
        p.translate(w / 2, h / 2)
        p.scale(vp.zoom, vp.zoom)
        p.translate(-w / 2, -h / 2)

        # 1. Backdrop (open chain)
        backdrop = self._pixmap(state.bracelet.backdrop, state.bracelet.grayscale)
        if backdrop is not None:
            scaled = backdrop.scaled(w, h, Qt.KeepAspectRatio, Qt.SmoothTransformation)
            p.drawPixmap((w - scaled.width()) // 2, (h - scaled.height()) // 2, scaled)

        # 2. Slot guides while a charm is being dragged
        if self._drag_charm is not None:
            p.setPen(QPen(QColor(212, 175, 55, 160), 2, Qt.DashLine))
            for i, (x, y) in enumerate(self._current_slots()):
                r = 10 if i == self._hover_slot else 6
                p.drawEllipse(QPointF(x / DESIGN_WIDTH * w, y / DESIGN_HEIGHT * h), r, r)

        # 3. Charms
        box = w * CHARM_SCALE
        slot_xy = {}
        if self._drag_charm is not None and self._hover_slot is not None:
            sx, sy = self._current_slots()[self._hover_slot]
            slot_xy[self._drag_charm] = (sx / DESIGN_WIDTH * w, sy / DESIGN_HEIGHT * h)

        for placed in place_charms(state.charms, w, h, state.bracelet.id):
            pix = self._pixmap(placed.instance.charm.image)
            if pix is None:
                continue
            x, y = slot_xy.get(placed.instance.instance_id, (placed.x, placed.y))
            scaled = pix.scaled(int(box), int(box), Qt.KeepAspectRatio, Qt.SmoothTransformation)
            p.drawPixmap(QRectF(x - scaled.width() / 2, y - scaled.height() / 2,
                                scaled.width(), scaled.height()), scaled, QRectF(scaled.rect()))
        p.end()

    def wheelEvent(self, event):
        # Qt reports scrolling up as positive; the viewport expects browser-style deltaY
        self.viewport.wheel(-event.angleDelta().y())
        self.update()
        event.accept()

    def mousePressEvent(self, event):
        if event.button() != Qt.LeftButton:
            return
        pos = event.pos()
        if self.viewport.begin_drag(pos.x(), pos.y()):
            self.setCursor(Qt.ClosedHandCursor)
            return

        if not self.viewport.can_drag_charms:
            return
        point = self._design_point(pos)
        state = self.store.state
        if point is None or not state.charms:
            return
        bracelet_id = state.bracelet.id if state.bracelet else None
        picked = charm_at(state.charms, point[0], point[1], bracelet_id)
        if picked is None:
            return

        slots = self._current_slots()
        index = next(i for i, ci in enumerate(state.charms) if ci.instance_id == picked)
        self._drag_charm = picked
        self._drag_offset = (point[0] - slots[index][0], point[1] - slots[index][1])
        self._hover_slot = index
        self.update()

    def mouseMoveEvent(self, event):
        # Qt keeps delivering moves to the pressed widget even outside its bounds
        pos = event.pos()
        if self.viewport.dragging:
            self.viewport.drag_to(pos.x(), pos.y())
            self.update()
        elif self._drag_charm is not None:
            point = self._design_point(pos)
            if point is not None:
                self._hover_slot = slot_at(self._current_slots(),
                                           point[0] - self._drag_offset[0], point[1] - self._drag_offset[1])
            self.update()

    def mouseReleaseEvent(self, event):
        if self.viewport.dragging:
            self.viewport.end_drag()
            self.unsetCursor()
        elif self._drag_charm is not None:
            dragged, slot = self._drag_charm, self._hover_slot
            self._drag_charm, self._hover_slot = None, None
            if slot is not None:
                self.store.move_charm_to_slot(dragged, slot)
                self.charm_moved.emit(dragged, slot)
        self.update()

    def event(self, event):
        if event.type() in (QEvent.TouchBegin, QEvent.TouchUpdate, QEvent.TouchEnd):
            self._touch(event)
            return True
        return super().event(event)

    def _touch(self, event):
        points = [tp for tp in event.touchPoints() if tp.state() != Qt.TouchPointReleased]
        vp = self.viewport

        if event.type() == QEvent.TouchEnd or len(points) < len(event.touchPoints()):
            anchor = (points[0].pos().x(), points[0].pos().y()) if len(points) == 1 else None
            vp.touches_changed(len(points), anchor)

        if len(points) == 2:
            p1, p2 = (points[0].pos().x(), points[0].pos().y()), (points[1].pos().x(), points[1].pos().y())
            if not vp.pinching:
                vp.begin_pinch(p1, p2)
            else:
                vp.pinch_to(p1, p2)
        elif len(points) == 1 and vp.can_pan:
            pos = points[0].pos()
            if not vp.dragging:
                vp.begin_drag(pos.x(), pos.y())
            else:
                vp.drag_to(pos.x(), pos.y())
        self.update()
