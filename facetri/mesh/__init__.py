"""
facetri メッシュ処理

ハーフエッジ構造のポリゴンメッシュと、その面を最適三角形分割する
機能を提供します。

処理フロー:
1. 多角形リストからメッシュ構築 (surface_mesh.py)
2. 面ごとの最適三角形分割 (triangulation.py)
3. 三角形配列への書き出し (triangle_mesh.py)
"""

# ハーフエッジメッシュ
from .surface_mesh import SurfaceMesh

# 三角形メッシュ
from .triangle_mesh import TriangleMesh

# 最適三角形分割
from .triangulation import (
    SurfaceTriangulation,
    PolygonCorners,
    EdgeInsertion,
    create_triangulator,
    triangulate_mesh
)

__all__ = [
    # メッシュ
    'SurfaceMesh',
    'TriangleMesh',

    # 三角形分割
    'SurfaceTriangulation',
    'PolygonCorners',
    'EdgeInsertion',
    'create_triangulator',
    'triangulate_mesh',
]
