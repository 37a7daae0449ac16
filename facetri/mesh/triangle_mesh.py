#!/usr/bin/env python3
"""
三角形メッシュ

三角形分割後の SurfaceMesh を numpy 配列として書き出すための
軽量データ構造と、面積・内角などの品質計測を提供します。
"""

from dataclasses import dataclass
from typing import Tuple, Optional
import numpy as np

from .utils import compute_triangle_normals, compute_vertex_normals


@dataclass
class TriangleMesh:
    """三角形メッシュデータ構造"""
    vertices: np.ndarray       # 頂点座標 (N, 3) - (x, y, z)
    triangles: np.ndarray      # 三角形インデックス (M, 3)
    triangle_normals: Optional[np.ndarray] = None  # 三角形法線 (M, 3)
    vertex_normals: Optional[np.ndarray] = None   # 頂点法線 (N, 3)

    @property
    def num_vertices(self) -> int:
        """頂点数を取得"""
        return len(self.vertices)

    @property
    def num_triangles(self) -> int:
        """三角形数を取得"""
        return len(self.triangles)

    def get_bounds(self) -> Tuple[np.ndarray, np.ndarray]:
        """バウンディングボックスを取得"""
        min_bounds = np.min(self.vertices, axis=0)
        max_bounds = np.max(self.vertices, axis=0)
        return min_bounds, max_bounds

    def get_triangle_areas(self) -> np.ndarray:
        """三角形の面積を計算"""
        v0 = self.vertices[self.triangles[:, 0]]
        v1 = self.vertices[self.triangles[:, 1]]
        v2 = self.vertices[self.triangles[:, 2]]

        # 3D外積の長さは2倍の面積
        cross = np.cross(v1 - v0, v2 - v0)
        return np.linalg.norm(cross, axis=1) / 2.0

    def get_min_angles(self) -> np.ndarray:
        """各三角形の最小内角（ラジアン）を計算"""
        angles = np.empty((self.num_triangles, 3))
        for corner in range(3):
            p = self.vertices[self.triangles[:, corner]]
            q = self.vertices[self.triangles[:, (corner + 1) % 3]]
            r = self.vertices[self.triangles[:, (corner + 2) % 3]]
            u = q - p
            w = r - p
            denom = np.linalg.norm(u, axis=1) * np.linalg.norm(w, axis=1) + 1e-12
            cos = np.clip(np.sum(u * w, axis=1) / denom, -1.0, 1.0)
            angles[:, corner] = np.arccos(cos)
        return angles.min(axis=1)

    def compute_normals(self) -> "TriangleMesh":
        """法線配列を再計算して自身を返す"""
        self.triangle_normals = compute_triangle_normals(self.vertices, self.triangles)
        self.vertex_normals = compute_vertex_normals(
            self.vertices, self.triangles, self.triangle_normals
        )
        return self
