#!/usr/bin/env python3
"""
最適三角形分割

ポリゴンメッシュの各面（単純多角形）を、選択した品質目的関数の下で
大域的に最適な三角形分割に置き換えます。

処理フロー（面ごと）:
1. 境界コーナーの収集と多様体検証
2. 区間動的計画法による最適分割点の計算 (O(n^3) 時間, O(n^2) メモリ)
3. 分割点を作業スタックで再生し、対角線をメッシュに挿入

目的関数:
- MIN_AREA: 三角形面積の二乗和を最小化（区間の和で結合）
- MAX_ANGLE: 最悪三角形の最大コサインを最小化（区間の最大値で結合）
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union
import numpy as np

from facetri import get_logger
from facetri.config import FacetriConfig, configure_logging, get_config
from facetri.constants import MIN_POLYGON_CORNERS, NO_SPLIT
from facetri.data_types import FaceStatus, Objective, TriangulationReport
from .surface_mesh import SurfaceMesh
from .utils import triangle_max_cosine, triangle_squared_area

logger = get_logger(__name__)


class EdgeInsertion(Enum):
    """対角線挿入の結果"""
    INSERTED = "inserted"        # 面を分割した
    EXISTS = "exists"            # 既にエッジがある（何もしない）
    UNREACHABLE = "unreachable"  # 共通の面境界上で到達できない


@dataclass
class PolygonCorners:
    """1面分の境界コーナー（面ごとに作成・破棄）"""
    halfedges: List[int]   # 各コーナーに入るハーフエッジ
    vertices: List[int]    # 各コーナーの頂点

    @property
    def size(self) -> int:
        return len(self.vertices)


class SurfaceTriangulation:
    """動的計画法による面の最適三角形分割クラス"""

    def __init__(
        self,
        mesh: SurfaceMesh,
        objective: Union[Objective, str] = Objective.MIN_AREA,
        reject_interior_edges: bool = False,
        log_statistics: bool = True
    ):
        """
        初期化

        Args:
            mesh: 分割対象メッシュ（その場で変更される）
            objective: デフォルトの目的関数
            reject_interior_edges: 既存の内部エッジを再利用する三角形も拒否するか
            log_statistics: メッシュ全体処理の集計を INFO で出力するか（False なら DEBUG）
        """
        self.mesh = mesh
        self.objective = Objective.from_value(objective)
        self.reject_interior_edges = reject_interior_edges
        self.log_statistics = log_statistics

        # パフォーマンス統計
        self.stats = {
            'total_faces': 0,
            'triangulated_faces': 0,
            'skipped_faces': 0,
            'non_manifold_faces': 0,
            'incomplete_faces': 0,
            'failed_faces': 0,
            'inserted_edges': 0,
            'total_time_ms': 0.0,
            'average_time_ms': 0.0,
            'last_num_corners': 0,
        }

    def triangulate(self, objective: Union[Objective, str, None] = None) -> TriangulationReport:
        """
        メッシュ全体の面を三角形分割

        Args:
            objective: 目的関数（None ならコンストラクタの値）

        Returns:
            面ごとの結果を集計したレポート
        """
        objective = self._resolve_objective(objective)
        start_time = time.perf_counter()
        report = TriangulationReport()
        edges_before = self.mesh.n_edges

        # 開始時点の面のみ処理（分割で追加された面は再訪しない）
        for f in self.mesh.faces():
            face_start = time.perf_counter()
            try:
                status = self.triangulate_face(f, objective)
            except Exception:  # noqa: BLE001 - 1面の失敗で全体を止めない
                logger.exception("Triangulation of face %d failed", f)
                status = FaceStatus.FAILED
                self._update_stats(status, (time.perf_counter() - face_start) * 1000, 0)
            report.record(f, status)

        report.edges_inserted = self.mesh.n_edges - edges_before
        report.elapsed_ms = (time.perf_counter() - start_time) * 1000

        logger.log(
            logging.INFO if self.log_statistics else logging.DEBUG,
            "Triangulated mesh (%s): %d faces, %d split, %d skipped, "
            "%d non-manifold, %d incomplete, %d failed, %d edges in %.2fms",
            objective.value, report.faces_processed, report.faces_triangulated,
            report.faces_skipped, report.faces_non_manifold,
            report.faces_incomplete, report.faces_failed,
            report.edges_inserted, report.elapsed_ms
        )
        return report

    def triangulate_face(self, face: int, objective: Union[Objective, str, None] = None) -> FaceStatus:
        """
        1つの面を三角形分割

        Args:
            face: 面ハンドル
            objective: 目的関数（None ならコンストラクタの値）

        Returns:
            面の処理結果
        """
        objective = self._resolve_objective(objective)
        start_time = time.perf_counter()

        polygon = self._collect_polygon(face)
        if polygon is None:
            status = FaceStatus.NON_MANIFOLD
        elif polygon.size < MIN_POLYGON_CORNERS:
            status = FaceStatus.ALREADY_TRIANGLE
        else:
            _, split = self._compute_optimal_splits(polygon, objective)
            status = self._insert_triangles(polygon, split)

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        self._update_stats(status, elapsed_ms, 0 if polygon is None else polygon.size)
        return status

    # ------------------------------------------------------------------
    # 境界コーナー収集
    # ------------------------------------------------------------------

    def _collect_polygon(self, face: int) -> Optional[PolygonCorners]:
        """面の境界を一周してコーナーを収集（非多様体頂点があれば None）"""
        mesh = self.mesh
        halfedges = []
        vertices = []

        h0 = mesh.halfedge(face)
        h = h0
        while True:
            v = mesh.to_vertex(h)
            if not mesh.is_manifold(v):
                logger.warning("Non-manifold polygon at face %d (vertex %d)", face, v)
                return None
            halfedges.append(h)
            vertices.append(v)
            h = mesh.next_halfedge(h)
            if h == h0:
                break

        return PolygonCorners(halfedges=halfedges, vertices=vertices)

    # ------------------------------------------------------------------
    # 動的計画法
    # ------------------------------------------------------------------

    def _compute_optimal_splits(
        self,
        polygon: PolygonCorners,
        objective: Objective
    ) -> Tuple[np.ndarray, np.ndarray]:
        """
        全ての部分区間 [i, k] の最適分割を計算

        Returns:
            (重み表 W, 分割表 S)。W[i][k] は区間の最適目的値、
            S[i][k] はそのときの分割コーナー
        """
        n = polygon.size
        weight = np.full((n, n), np.inf)
        split = np.full((n, n), NO_SPLIT, dtype=np.int64)

        # 2角形（多角形の辺）
        for i in range(n - 1):
            weight[i, i + 1] = 0.0

        for length in range(2, n):
            for i in range(n - length):
                k = i + length
                wmin = np.inf
                imin = NO_SPLIT

                for m in range(i + 1, k):
                    w = self._compute_weight(polygon, i, m, k, objective)
                    if objective is Objective.MIN_AREA:
                        candidate = weight[i, m] + w + weight[m, k]
                    else:
                        candidate = max(weight[i, m], w, weight[m, k])

                    if candidate < wmin:
                        wmin = candidate
                        imin = m

                # 全候補が無限大のときは最小の分割点を使う
                if imin == NO_SPLIT:
                    imin = i + 1

                weight[i, k] = wmin
                split[i, k] = imin

        return weight, split

    def _compute_weight(self, polygon: PolygonCorners, i: int, m: int, k: int, objective: Objective) -> float:
        """三角形 (i, m, k) のコスト（使用不可なら無限大）"""
        mesh = self.mesh
        a = polygon.vertices[i]
        b = polygon.vertices[m]
        c = polygon.vertices[k]

        # 厳格モード: 新たに対角線となる組が既存の内部エッジなら拒否
        if self.reject_interior_edges:
            for p, q in self._chord_pairs(polygon, i, m, k):
                if mesh.is_interior_edge(polygon.vertices[p], polygon.vertices[q]):
                    return np.inf

        # 3辺が全て既存エッジなら閉じた三角形になり分割できない
        if mesh.is_edge(a, b) and mesh.is_edge(b, c) and mesh.is_edge(c, a):
            return np.inf

        pa = mesh.position(a)
        pb = mesh.position(b)
        pc = mesh.position(c)

        if objective is Objective.MIN_AREA:
            return triangle_squared_area(pa, pb, pc)
        return triangle_max_cosine(pa, pb, pc)

    @staticmethod
    def _chord_pairs(polygon: PolygonCorners, i: int, m: int, k: int) -> List[Tuple[int, int]]:
        """三角形 (i, m, k) の辺のうち多角形の辺ではない組"""
        pairs = []
        if m - i > 1:
            pairs.append((i, m))
        if k - m > 1:
            pairs.append((m, k))
        if k - i > 1 and not (i == 0 and k == polygon.size - 1):
            pairs.append((i, k))
        return pairs

    # ------------------------------------------------------------------
    # メッシュへの反映
    # ------------------------------------------------------------------

    def _insert_triangles(self, polygon: PolygonCorners, split: np.ndarray) -> FaceStatus:
        """
        分割表を上から再生して対角線を挿入

        n 角形は n-3 本の対角線で三角形になる。既存エッジとして
        スキップされた対角線があれば、面の一部は多角形のまま残る。

        Returns:
            全対角線を挿入できたら TRIANGULATED、それ以外は INCOMPLETE
        """
        inserted = 0
        todo = [(0, polygon.size - 1)]
        while todo:
            start, end = todo.pop()
            if end - start < 2:
                continue
            m = int(split[start, end])

            for i, j in ((start, m), (m, end)):
                result = self._insert_edge(polygon, i, j)
                if result is EdgeInsertion.UNREACHABLE:
                    return FaceStatus.INCOMPLETE
                if result is EdgeInsertion.INSERTED:
                    inserted += 1
                    self.stats['inserted_edges'] += 1

            todo.append((start, m))
            todo.append((m, end))

        expected = polygon.size - 3
        if inserted < expected:
            logger.warning(
                "Face with %d corners kept a polygon: %d of %d diagonals already existed",
                polygon.size, expected - inserted, expected
            )
            return FaceStatus.INCOMPLETE

        return FaceStatus.TRIANGULATED

    def _insert_edge(self, polygon: PolygonCorners, i: int, j: int) -> EdgeInsertion:
        """コーナー i, j を結ぶ対角線を挿入"""
        mesh = self.mesh
        h0 = polygon.halfedges[i]
        h1 = polygon.halfedges[j]
        v0 = polygon.vertices[i]
        v1 = polygon.vertices[j]

        if mesh.is_edge(v0, v1):
            return EdgeInsertion.EXISTS

        # h0 から v1 に到達できるか
        h = h0
        while True:
            h = mesh.next_halfedge(h)
            if mesh.to_vertex(h) == v1:
                mesh.insert_edge(h0, h)
                return EdgeInsertion.INSERTED
            if h == h0:
                break

        # h1 から v0 に到達できるか
        h = h1
        while True:
            h = mesh.next_halfedge(h)
            if mesh.to_vertex(h) == v0:
                mesh.insert_edge(h1, h)
                return EdgeInsertion.INSERTED
            if h == h1:
                break

        logger.error(
            "Corners %d and %d (vertices %d, %d) do not share a face boundary",
            i, j, v0, v1
        )
        return EdgeInsertion.UNREACHABLE

    # ------------------------------------------------------------------
    # 統計
    # ------------------------------------------------------------------

    def _resolve_objective(self, objective: Union[Objective, str, None]) -> Objective:
        if objective is None:
            return self.objective
        return Objective.from_value(objective)

    def _update_stats(self, status: FaceStatus, elapsed_ms: float, num_corners: int) -> None:
        """統計更新"""
        self.stats['total_faces'] += 1
        self.stats['total_time_ms'] += elapsed_ms
        self.stats['average_time_ms'] = self.stats['total_time_ms'] / self.stats['total_faces']
        self.stats['last_num_corners'] = num_corners

        if status is FaceStatus.TRIANGULATED:
            self.stats['triangulated_faces'] += 1
        elif status is FaceStatus.ALREADY_TRIANGLE:
            self.stats['skipped_faces'] += 1
        elif status is FaceStatus.NON_MANIFOLD:
            self.stats['non_manifold_faces'] += 1
        elif status is FaceStatus.INCOMPLETE:
            self.stats['incomplete_faces'] += 1
        elif status is FaceStatus.FAILED:
            self.stats['failed_faces'] += 1

    def get_performance_stats(self) -> Dict[str, Any]:
        """パフォーマンス統計を取得"""
        return self.stats.copy()

    def reset_stats(self) -> None:
        """統計をリセット"""
        for key in self.stats:
            self.stats[key] = 0.0 if key.endswith('_ms') else 0


def create_triangulator(mesh: SurfaceMesh, config=None) -> SurfaceTriangulation:
    """
    設定から三角形分割器を作成

    Args:
        mesh: 分割対象メッシュ
        config: TriangulationConfig または FacetriConfig（None ならグローバル設定）
            FacetriConfig を渡した場合はログ設定も適用する

    Returns:
        三角形分割器
    """
    if config is None:
        config = get_config()
    elif isinstance(config, FacetriConfig):
        configure_logging(config)
    section = getattr(config, 'triangulation', config)

    return SurfaceTriangulation(
        mesh,
        objective=section.get_objective(),
        reject_interior_edges=section.reject_interior_edges,
        log_statistics=section.log_statistics
    )


def triangulate_mesh(
    mesh: SurfaceMesh,
    objective: Union[Objective, str] = Objective.MIN_AREA,
    reject_interior_edges: bool = False
) -> TriangulationReport:
    """
    メッシュの全ての面を三角形分割（簡単なインターフェース）

    Args:
        mesh: 分割対象メッシュ（その場で変更される）
        objective: 目的関数
        reject_interior_edges: 既存の内部エッジを再利用する三角形も拒否するか

    Returns:
        三角形分割レポート
    """
    triangulator = SurfaceTriangulation(
        mesh,
        objective=objective,
        reject_interior_edges=reject_interior_edges
    )
    return triangulator.triangulate()
