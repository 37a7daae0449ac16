#!/usr/bin/env python3
"""
pytest共通設定とフィクスチャ

テスト実行時の共通設定、テスト用メッシュ、アサーション拡張を提供します。
"""

import pytest
import logging
import sys
import os
import tempfile
import numpy as np
from typing import Generator, List, Sequence

# facetriモジュールのパス追加
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from facetri import setup_logging, get_logger
from facetri.mesh import SurfaceMesh

# =============================================================================
# テストロギング設定
# =============================================================================

@pytest.fixture(scope="session", autouse=True)
def setup_test_logging():
    """テスト全体のロギング設定"""
    setup_logging(level="DEBUG")
    logger = get_logger("test")
    logger.info("=== テストセッション開始 ===")
    yield
    logger.info("=== テストセッション終了 ===")


@pytest.fixture
def temp_directory() -> Generator[str, None, None]:
    """一時ディレクトリ"""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield temp_dir


# =============================================================================
# テスト用メッシュ生成
# =============================================================================

def regular_polygon_points(n: int, radius: float = 1.0) -> np.ndarray:
    """xy平面上の正n角形（反時計回り）"""
    angles = 2.0 * np.pi * np.arange(n) / n
    return np.column_stack([radius * np.cos(angles), radius * np.sin(angles), np.zeros(n)])


def polygon_area(points: np.ndarray) -> float:
    """xy平面上の多角形面積（靴紐公式）"""
    x = points[:, 0]
    y = points[:, 1]
    return 0.5 * abs(np.dot(x, np.roll(y, -1)) - np.dot(y, np.roll(x, -1)))


def single_polygon_mesh(points: Sequence[Sequence[float]]) -> SurfaceMesh:
    """1つの多角形面だけを持つメッシュ"""
    points = np.asarray(points, dtype=float)
    return SurfaceMesh.from_polygons(points, [list(range(len(points)))])


def cube_mesh() -> SurfaceMesh:
    """6つの四角形面からなる閉じた立方体"""
    points = np.array([
        [0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [1.0, 1.0, 0.0], [0.0, 1.0, 0.0],
        [0.0, 0.0, 1.0], [1.0, 0.0, 1.0], [1.0, 1.0, 1.0], [0.0, 1.0, 1.0],
    ])
    faces = [
        [0, 3, 2, 1],  # 底面
        [4, 5, 6, 7],  # 上面
        [0, 1, 5, 4],  # 前面
        [1, 2, 6, 5],  # 右面
        [2, 3, 7, 6],  # 背面
        [3, 0, 4, 7],  # 左面
    ]
    return SurfaceMesh.from_polygons(points, faces)


def prism_mesh(n: int) -> SurfaceMesh:
    """正n角柱（上下のn角形と側面の四角形）"""
    bottom = regular_polygon_points(n)
    top = bottom + np.array([0.0, 0.0, 1.0])
    points = np.vstack([bottom, top])
    faces: List[List[int]] = [
        list(reversed(range(n))),       # 底面（下向き）
        list(range(n, 2 * n)),          # 上面
    ]
    for i in range(n):
        j = (i + 1) % n
        faces.append([i, j, n + j, n + i])
    return SurfaceMesh.from_polygons(points, faces)


@pytest.fixture
def square_mesh() -> SurfaceMesh:
    """単位正方形1面"""
    return single_polygon_mesh([[0, 0, 0], [1, 0, 0], [1, 1, 0], [0, 1, 0]])


@pytest.fixture
def pillow_mesh() -> SurfaceMesh:
    """
    四角形 [0,1,2,3] と、その辺 0-1, 1-2 を共有する三角形 [0,2,1]

    頂点 0, 1, 2 は既存エッジだけで閉じた三角形を成す
    """
    points = np.array([
        [3.0, 0.0, 0.0], [2.0, 2.0, 0.0], [0.0, 1.0, 0.0], [0.0, 0.0, 0.0],
    ])
    return SurfaceMesh.from_polygons(points, [[0, 1, 2, 3], [0, 2, 1]])


@pytest.fixture
def bowtie_mesh() -> SurfaceMesh:
    """頂点 0 だけを共有する四角形と三角形（頂点 0 が非多様体）"""
    points = np.array([
        [0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [1.0, 1.0, 0.0], [0.0, 1.0, 0.0],
        [-1.0, 0.0, 0.0], [-1.0, -1.0, 0.0],
    ])
    return SurfaceMesh.from_polygons(points, [[0, 1, 2, 3], [0, 4, 5]])


# =============================================================================
# アサーション拡張
# =============================================================================

class TestAssertions:
    """カスタムアサーション"""

    @staticmethod
    def assert_within_tolerance(actual: float, expected: float, tolerance: float, description: str = "値"):
        """許容誤差内アサーション"""
        diff = abs(actual - expected)
        assert diff <= tolerance, (
            f"{description}が許容誤差を超過: |{actual} - {expected}| = {diff} > {tolerance}"
        )

    @staticmethod
    def assert_all_triangles(mesh: SurfaceMesh):
        """全ての面が三角形であることのアサーション"""
        for f in mesh.faces():
            assert mesh.valence(f) == 3, f"面{f}が三角形ではない: {mesh.face_vertices(f)}"


@pytest.fixture
def assert_helper():
    """アサーション拡張のヘルパー"""
    return TestAssertions()


# =============================================================================
# テストスイート選択
# =============================================================================

def pytest_collection_modifyitems(config, items):
    """テスト収集時の自動マーカー付与"""
    for item in items:
        if "performance" in item.nodeid:
            item.add_marker(pytest.mark.performance)
            item.add_marker(pytest.mark.slow)
        elif "integration" in item.nodeid:
            item.add_marker(pytest.mark.integration)
        elif "test_" in item.name:
            item.add_marker(pytest.mark.unit)
