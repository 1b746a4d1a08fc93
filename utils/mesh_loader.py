# utils/mesh_loader.py
import logging

import numpy as np
import trimesh

log = logging.getLogger(__name__)

# Charms are normalised to this size so they sit evenly on the 3D chain
CHARM_MODEL_SIZE = 0.6


class MeshData:
    """Simple container for a normalised charm mesh"""
    def __init__(self, vertices, normals, faces, extents):
        self.vertices = vertices
        self.normals = normals
        self.faces = faces
        self.extents = extents


def load_mesh_data(path, target_size=CHARM_MODEL_SIZE):
    """Loads a charm model, centres it on the origin and scales its longest side to target_size."""
    try:
        mesh = trimesh.load(path, force='mesh')
    except (OSError, ValueError) as e:
        log.warning("Error loading mesh %s: %s", path, e)
        return None

    if mesh.is_empty:
        log.warning("Mesh %s has no geometry", path)
        return None

    # 1. Move the bounding-box centre to (0,0,0)
    mesh.apply_translation(-mesh.bounds.mean(axis=0))

    # 2. Normalise size
    max_span = float(np.max(mesh.extents))
    if max_span > 0:
        mesh.apply_scale(target_size / max_span)

    verts = np.array(mesh.vertices, dtype=np.float32)
    norms = np.array(mesh.vertex_normals, dtype=np.float32)
    faces = np.array(mesh.faces, dtype=np.uint32)
    return MeshData(verts, norms, faces, np.array(mesh.extents, dtype=np.float32))
