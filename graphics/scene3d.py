# graphics/scene3d.py
"""Charms spread around a 3D chain ring for the turntable preview."""
from collections import namedtuple

import numpy as np

from utils.mesh_loader import load_mesh_data

RING_RADIUS = 2.2
CHARM_HEIGHT = 0.3

SceneNode = namedtuple("SceneNode", ["instance", "position", "mesh"])


def ring_positions(count, radius=RING_RADIUS, height=CHARM_HEIGHT):
    """(count, 3) array of x/y/z, evenly spaced around the ring starting at angle 0."""
    if count <= 0:
        return np.zeros((0, 3))
    angles = np.arange(count) / count * 2 * np.pi
    return np.column_stack([np.cos(angles) * radius, np.full(count, height), np.sin(angles) * radius])


def build_ring_scene(charms, resolve_model_path, radius=RING_RADIUS, loader=load_mesh_data):
    """
    One node per charm instance, in selection order.
    `resolve_model_path(charm)` gives a local file or None; charms without a
    usable model get mesh=None and are drawn as a flat icon.
    """
    positions = ring_positions(len(charms), radius)
    meshes = {}
    nodes = []
    for ci, pos in zip(charms, positions):
        path = resolve_model_path(ci.charm)
        if path and path not in meshes:
            meshes[path] = loader(path)
        nodes.append(SceneNode(ci, tuple(float(v) for v in pos), meshes.get(path) if path else None))
    return nodes


# --- Turntable projection (painted with QPainter, no GL) ---
CAMERA_DISTANCE = 8.0
CAMERA_TILT = 20.0   # degrees, looking slightly down onto the ring
LIGHT_AMBIENT = 0.35

ProjectedFace = namedtuple("ProjectedFace", ["depth", "points", "shade", "instance_id"])
ProjectedMarker = namedtuple("ProjectedMarker", ["depth", "point", "instance_id"])


def view_rotation(angle_deg, tilt_deg=CAMERA_TILT):
    """Turntable spin about y, then the camera tilt about x."""
    a, t = np.radians(angle_deg), np.radians(tilt_deg)
    yaw = np.array([[np.cos(a), 0, np.sin(a)], [0, 1, 0], [-np.sin(a), 0, np.cos(a)]])
    tilt = np.array([[1, 0, 0], [0, np.cos(t), -np.sin(t)], [0, np.sin(t), np.cos(t)]])
    return tilt @ yaw


def project_points(points, rotation, width, height, distance=CAMERA_DISTANCE):
    """
    Perspective projection of (n, 3) world points onto a width x height view.
    Returns (xy, depth): screen pixels with y down, and distance from the camera.
    """
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 3) @ rotation.T
    depth = np.maximum(distance - pts[:, 2], 1e-3)
    focal = min(width, height)
    xy = np.column_stack([width / 2 + focal * pts[:, 0] / depth,
                          height / 2 - focal * pts[:, 1] / depth])
    return xy, depth


def ring_outline(angle_deg, width, height, radius=RING_RADIUS, height_y=CHARM_HEIGHT, segments=64):
    """Closed polyline of the chain itself, (segments, 2) screen points."""
    angles = np.arange(segments) / segments * 2 * np.pi
    circle = np.column_stack([np.cos(angles) * radius, np.full(segments, height_y), np.sin(angles) * radius])
    xy, _ = project_points(circle, view_rotation(angle_deg), width, height)
    return xy


def project_scene(nodes, angle_deg, width, height, distance=CAMERA_DISTANCE):
    """
    Flattens a ring scene for painting.

    Mesh triangles come back far-to-near (painter's order) with a flat shade
    in [LIGHT_AMBIENT, 1]; charms without a mesh come back as point markers.
    """
    rotation = view_rotation(angle_deg)
    faces, markers = [], []
    for node in nodes:
        centre = np.asarray(node.position, dtype=np.float64)
        iid = node.instance.instance_id
        if node.mesh is None:
            xy, depth = project_points(centre, rotation, width, height, distance)
            markers.append(ProjectedMarker(float(depth[0]), (float(xy[0, 0]), float(xy[0, 1])), iid))
            continue

        verts = np.asarray(node.mesh.vertices, dtype=np.float64) + centre
        tris = np.asarray(node.mesh.faces)
        if not len(tris):
            continue
        xy, depth = project_points(verts, rotation, width, height, distance)

        # Light comes from the camera, so the shade is |normal . view axis|
        world = verts @ rotation.T
        tri = world[tris]
        normals = np.cross(tri[:, 1] - tri[:, 0], tri[:, 2] - tri[:, 0])
        lengths = np.linalg.norm(normals, axis=1)
        lengths[lengths == 0] = 1.0
        shade = LIGHT_AMBIENT + (1 - LIGHT_AMBIENT) * np.abs(normals[:, 2] / lengths)
        face_depth = depth[tris].mean(axis=1)

        for i in range(len(tris)):
            faces.append(ProjectedFace(float(face_depth[i]), xy[tris[i]], float(shade[i]), iid))

    faces.sort(key=lambda f: f.depth, reverse=True)
    markers.sort(key=lambda m: m.depth, reverse=True)
    return faces, markers
