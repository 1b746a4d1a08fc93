# ui/ring_view.py
from PyQt5.QtWidgets import QWidget
from PyQt5.QtCore import Qt, QTimer, QPointF
from PyQt5.QtGui import QPainter, QColor, QPen, QBrush, QPolygonF

from graphics.scene3d import build_ring_scene, project_scene, ring_outline
from utils.mesh_loader import load_mesh_data

GOLD = (212, 175, 55)


class RingView(QWidget):
    """
    Turntable preview: the selected charms spread around a 3D ring.
    Charms with a model are drawn as shaded meshes, the rest as gold dots.
    """

    def __init__(self, store, resolve_model_path, parent=None):
        super().__init__(parent)
        self.store = store
        self.resolve_model_path = resolve_model_path
        self.angle = 0.0
        self.nodes = []
        self._meshes = {}   # model path -> MeshData, kept across rebuilds

        self.timer = QTimer(self)
        self.timer.timeout.connect(self.rotate)

        self.setMinimumSize(400, 175)
        self._unsubscribe = store.subscribe(lambda _s: self.rebuild())
        self.rebuild()

    def _load_mesh(self, path):
        if path not in self._meshes:
            self._meshes[path] = load_mesh_data(path)
        return self._meshes[path]

    def rebuild(self):
        self.nodes = build_ring_scene(self.store.state.charms, self.resolve_model_path,
                                      loader=self._load_mesh)
        self.update()

    def rotate(self, step=2.0):
        self.angle = (self.angle + step) % 360
        self.update()

    def set_spinning(self, on):
        if on:
            self.timer.start(33)
        else:
            self.timer.stop()

    def detach(self):
        self.timer.stop()
        self._unsubscribe()

    def paintEvent(self, event):
        p = QPainter(self)
        p.setRenderHint(QPainter.Antialiasing)
        p.fillRect(self.rect(), QColor("#FAFAF9"))
        w, h = self.width(), self.height()

        # 1. Chain
        outline = ring_outline(self.angle, w, h)
        p.setPen(QPen(QColor(*GOLD), 3))
        p.setBrush(Qt.NoBrush)
        p.drawPolygon(QPolygonF([QPointF(x, y) for x, y in outline]))

        # 2. Charms, far to near
        faces, markers = project_scene(self.nodes, self.angle, w, h)
        p.setPen(Qt.NoPen)
        for face in faces:
            r, g, b = (int(c * face.shade) for c in GOLD)
            p.setBrush(QBrush(QColor(r, g, b)))
            p.drawPolygon(QPolygonF([QPointF(x, y) for x, y in face.points]))

        p.setBrush(QBrush(QColor(*GOLD)))
        for marker in markers:
            p.drawEllipse(QPointF(*marker.point), 8, 8)
        p.end()
