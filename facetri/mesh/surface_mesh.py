#!/usr/bin/env python3
"""
ハーフエッジ・サーフェスメッシュ

多角形面からなるメッシュをハーフエッジ構造で保持します。
頂点・ハーフエッジ・面は整数ハンドルで参照し、ハーフエッジは
2本1組（h と h ^ 1 が互いに逆向き）でエッジを構成します。

提供する操作:
- 多角形リストからの構築（境界ハーフエッジの連結を含む）
- 面周りの走査、端点の取得、境界・多様体判定
- 頂点間エッジの検索
- 面を2つに分割するエッジ挿入
- 三角形配列への書き出し
"""

from typing import Dict, Iterator, List, Sequence, Tuple
import numpy as np

from facetri import get_logger
from facetri.constants import INVALID_HANDLE
from .triangle_mesh import TriangleMesh

logger = get_logger(__name__)


class SurfaceMesh:
    """ハーフエッジ構造による多角形メッシュ"""

    def __init__(self):
        # 頂点座標 (N, 3)
        self._points = np.zeros((0, 3), dtype=float)

        # ハーフエッジ接続（インデックス = ハーフエッジハンドル）
        self._to_vertex: List[int] = []
        self._next: List[int] = []
        self._prev: List[int] = []
        self._face: List[int] = []

        # 面の代表ハーフエッジ
        self._face_halfedge: List[int] = []

        # 頂点ごとの出ていくハーフエッジ、(始点, 終点) -> ハーフエッジ
        self._outgoing: List[List[int]] = []
        self._halfedge_map: Dict[Tuple[int, int], int] = {}

    # ------------------------------------------------------------------
    # 構築
    # ------------------------------------------------------------------

    @classmethod
    def from_polygons(cls, points, faces: Sequence[Sequence[int]]) -> "SurfaceMesh":
        """
        頂点座標と多角形リストからメッシュを構築

        Args:
            points: 頂点座標 (N, 3)
            faces: 各面の頂点インデックス列（反時計回り、3頂点以上）

        Returns:
            構築されたメッシュ

        Raises:
            ValueError: 座標形状・面の頂点数・インデックス範囲が不正、
                        面内で頂点が重複、または同じ向きのエッジが2面で共有される場合
        """
        points = np.asarray(points, dtype=float)
        if points.ndim != 2 or points.shape[1] != 3:
            raise ValueError("Points must be a Nx3 array.")

        mesh = cls()
        mesh._points = points.copy()
        mesh._outgoing = [[] for _ in range(len(points))]

        for face_vertices in faces:
            mesh._add_face(list(face_vertices))

        mesh._link_boundary()

        logger.debug(
            "SurfaceMesh built: %d vertices, %d edges, %d faces",
            mesh.n_vertices, mesh.n_edges, mesh.n_faces
        )
        return mesh

    def _add_face(self, face_vertices: List[int]) -> int:
        """面を追加（境界ハーフエッジの連結は _link_boundary で行う）"""
        n = len(face_vertices)
        if n < 3:
            raise ValueError(f"Face must have at least 3 vertices, got {n}")
        if len(set(face_vertices)) != n:
            raise ValueError(f"Face has repeated vertices: {face_vertices}")
        for v in face_vertices:
            if not 0 <= v < self.n_vertices:
                raise ValueError(f"Vertex index {v} out of range")

        # エッジ作成（既存なら逆向きハーフエッジを再利用）
        halfedges = []
        for i in range(n):
            a = face_vertices[i]
            b = face_vertices[(i + 1) % n]
            h = self._halfedge_map.get((a, b))
            if h is None:
                h = self._new_edge(a, b)
            elif self._face[h] != INVALID_HANDLE:
                raise ValueError(f"Complex edge ({a}, {b}) shared by two faces")
            halfedges.append(h)

        f = self._new_face(halfedges[0])
        for i in range(n):
            h = halfedges[i]
            self._set_next(h, halfedges[(i + 1) % n])
            self._face[h] = f
        return f

    def _link_boundary(self) -> None:
        """面を持たないハーフエッジを境界ループとして連結"""
        for h in range(self.n_halfedges):
            if self._face[h] != INVALID_HANDLE:
                continue

            # 終点周りの面の扇を回り、次の境界ハーフエッジを探す
            g = self.opposite_halfedge(h)
            while True:
                g = self.opposite_halfedge(self._prev[g])
                if self._face[g] == INVALID_HANDLE:
                    break
            self._set_next(h, g)

    def _new_edge(self, a: int, b: int) -> int:
        """a -> b と b -> a のハーフエッジ対を作成し、a -> b を返す"""
        h0 = len(self._to_vertex)
        h1 = h0 + 1
        for h, (src, dst) in ((h0, (a, b)), (h1, (b, a))):
            self._to_vertex.append(dst)
            self._next.append(INVALID_HANDLE)
            self._prev.append(INVALID_HANDLE)
            self._face.append(INVALID_HANDLE)
            self._outgoing[src].append(h)
            self._halfedge_map[(src, dst)] = h
        return h0

    def _new_face(self, h: int) -> int:
        self._face_halfedge.append(h)
        return len(self._face_halfedge) - 1

    def _set_next(self, h: int, nh: int) -> None:
        self._next[h] = nh
        self._prev[nh] = h

    # ------------------------------------------------------------------
    # 要素数・反復
    # ------------------------------------------------------------------

    @property
    def n_vertices(self) -> int:
        return len(self._points)

    @property
    def n_halfedges(self) -> int:
        return len(self._to_vertex)

    @property
    def n_edges(self) -> int:
        return self.n_halfedges // 2

    @property
    def n_faces(self) -> int:
        return len(self._face_halfedge)

    def vertices(self) -> range:
        return range(self.n_vertices)

    def faces(self) -> range:
        """現時点の面ハンドル（後から追加された面は含まない）"""
        return range(self.n_faces)

    # ------------------------------------------------------------------
    # 幾何
    # ------------------------------------------------------------------

    @property
    def points(self) -> np.ndarray:
        """頂点座標 (N, 3)"""
        return self._points

    def position(self, v: int) -> np.ndarray:
        return self._points[v]

    # ------------------------------------------------------------------
    # 走査
    # ------------------------------------------------------------------

    def halfedge(self, f: int) -> int:
        """面の代表ハーフエッジ"""
        self._check_face(f)
        return self._face_halfedge[f]

    def next_halfedge(self, h: int) -> int:
        return self._next[h]

    def prev_halfedge(self, h: int) -> int:
        return self._prev[h]

    @staticmethod
    def opposite_halfedge(h: int) -> int:
        return h ^ 1

    def to_vertex(self, h: int) -> int:
        return self._to_vertex[h]

    def from_vertex(self, h: int) -> int:
        return self._to_vertex[h ^ 1]

    def face(self, h: int) -> int:
        """ハーフエッジが属する面（境界なら INVALID_HANDLE）"""
        return self._face[h]

    def halfedges_around_face(self, f: int) -> Iterator[int]:
        h0 = self.halfedge(f)
        h = h0
        while True:
            yield h
            h = self._next[h]
            if h == h0:
                break

    def face_vertices(self, f: int) -> List[int]:
        """面の頂点（各ハーフエッジの終点）を境界順で取得"""
        return [self._to_vertex[h] for h in self.halfedges_around_face(f)]

    def valence(self, f: int) -> int:
        return sum(1 for _ in self.halfedges_around_face(f))

    # ------------------------------------------------------------------
    # 判定
    # ------------------------------------------------------------------

    def is_boundary(self, h: int) -> bool:
        return self._face[h] == INVALID_HANDLE

    def is_manifold(self, v: int) -> bool:
        """出ていく境界ハーフエッジが2本以上あれば非多様体（扇が複数）"""
        n = 0
        for h in self._outgoing[v]:
            if self._face[h] == INVALID_HANDLE:
                n += 1
        return n < 2

    def find_halfedge(self, a: int, b: int) -> int:
        """a -> b のハーフエッジ（なければ INVALID_HANDLE）"""
        return self._halfedge_map.get((a, b), INVALID_HANDLE)

    def is_edge(self, a: int, b: int) -> bool:
        return (a, b) in self._halfedge_map

    def is_interior_edge(self, a: int, b: int) -> bool:
        """a-b が既存エッジで、両側に面がある場合 True"""
        h = self.find_halfedge(a, b)
        if h == INVALID_HANDLE:
            return False
        return not self.is_boundary(h) and not self.is_boundary(h ^ 1)

    def is_triangle_mesh(self) -> bool:
        return all(self.valence(f) == 3 for f in self.faces())

    # ------------------------------------------------------------------
    # トポロジー操作
    # ------------------------------------------------------------------

    def insert_edge(self, h0: int, h1: int) -> int:
        """
        同じ面上の2本のハーフエッジの終点同士を新しいエッジで結び、面を分割

        Args:
            h0: 新エッジの始点に入るハーフエッジ
            h1: 新エッジの終点に入るハーフエッジ

        Returns:
            h0 側の面に属する新しいハーフエッジ（to_vertex(h0) -> to_vertex(h1)）
        """
        f0 = self._face[h0]
        if f0 == INVALID_HANDLE or f0 != self._face[h1]:
            raise ValueError(f"Halfedges {h0} and {h1} do not share a face")
        if h0 == h1:
            raise ValueError("Cannot insert an edge between identical halfedges")

        v0 = self._to_vertex[h0]
        v1 = self._to_vertex[h1]

        h2 = self._next[h0]
        h3 = self._next[h1]

        h4 = self._new_edge(v0, v1)
        h5 = h4 ^ 1

        f1 = self._new_face(h1)
        self._face_halfedge[f0] = h0

        self._set_next(h0, h4)
        self._set_next(h4, h3)
        self._face[h4] = f0

        self._set_next(h1, h5)
        self._set_next(h5, h2)
        h = h2
        while True:
            self._face[h] = f1
            h = self._next[h]
            if h == h2:
                break

        return h4

    # ------------------------------------------------------------------
    # 書き出し
    # ------------------------------------------------------------------

    def triangles(self) -> np.ndarray:
        """全ての面を三角形インデックス配列 (M, 3) として取得"""
        tris = np.empty((self.n_faces, 3), dtype=np.int64)
        for f in self.faces():
            verts = self.face_vertices(f)
            if len(verts) != 3:
                raise ValueError(f"Face {f} is not a triangle ({len(verts)} vertices)")
            tris[f] = verts
        return tris

    def to_triangle_mesh(self, compute_normals: bool = True) -> TriangleMesh:
        """三角形のみからなるメッシュを TriangleMesh に変換"""
        mesh = TriangleMesh(vertices=self._points.copy(), triangles=self.triangles())
        if compute_normals and mesh.num_triangles > 0:
            mesh.compute_normals()
        return mesh

    def _check_face(self, f: int) -> None:
        if not 0 <= f < self.n_faces:
            raise ValueError(f"Invalid face handle: {f}")
