from __future__ import annotations

"""Mesh utility helpers.

This module hosts small vector and triangle helpers that are shared across
mesh sub-modules without introducing unwanted import cycles.
"""

import numpy as np

from ..constants import NORMALIZE_EPSILON


# ---------------------------------------------------------------------------
# Vector helpers
# ---------------------------------------------------------------------------

def sqrnorm(v: np.ndarray) -> float:
    """Squared Euclidean norm of a single vector."""
    return float(np.dot(v, v))


def normalize(v: np.ndarray) -> np.ndarray:
    """Return *v* scaled to unit length; zero-length vectors stay zero."""
    n = float(np.linalg.norm(v))
    if n > NORMALIZE_EPSILON:
        return v * (1.0 / n)
    return np.zeros_like(v, dtype=float)


# ---------------------------------------------------------------------------
# Triangle measures
# ---------------------------------------------------------------------------

def triangle_squared_area(pa: np.ndarray, pb: np.ndarray, pc: np.ndarray) -> float:
    """Squared norm of the edge cross product (four times the squared area)."""
    return sqrnorm(np.cross(pb - pa, pc - pa))


def triangle_max_cosine(pa: np.ndarray, pb: np.ndarray, pc: np.ndarray) -> float:
    """Largest cosine among the three interior angles.

    A larger value means a smaller angle, so minimizing it maximizes the
    smallest angle of the triangle.
    """
    cosa = float(np.dot(normalize(pb - pa), normalize(pc - pa)))
    cosb = float(np.dot(normalize(pa - pb), normalize(pc - pb)))
    cosc = float(np.dot(normalize(pa - pc), normalize(pb - pc)))
    return max(cosa, max(cosb, cosc))


# ---------------------------------------------------------------------------
# Normals
# ---------------------------------------------------------------------------

def compute_triangle_normals(vertices: np.ndarray, triangles: np.ndarray) -> np.ndarray:
    """Compute per-triangle normals (unit length)."""
    v0 = vertices[triangles[:, 0]]
    v1 = vertices[triangles[:, 1]]
    v2 = vertices[triangles[:, 2]]
    normals = np.cross(v1 - v0, v2 - v0)
    norms = np.linalg.norm(normals, axis=1, keepdims=True) + 1e-12
    normals /= norms
    return normals


def compute_vertex_normals(vertices: np.ndarray, triangles: np.ndarray, tri_normals: np.ndarray) -> np.ndarray:
    """Compute vertex normals as the average of adjacent triangle normals."""
    vert_normals = np.zeros_like(vertices, dtype=float)
    for tri, n in zip(triangles, tri_normals):
        vert_normals[tri] += n
    norms = np.linalg.norm(vert_normals, axis=1, keepdims=True) + 1e-12
    vert_normals /= norms
    return vert_normals
