#!/usr/bin/env python3
"""
共通型定義

三角形分割の目的関数・面ごとの処理結果・メッシュ全体のレポートを
一元管理し、モジュール間の循環依存を解消します。
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Union


# =============================================================================
# 目的関数
# =============================================================================

class Objective(Enum):
    """三角形分割の品質目的関数"""
    MIN_AREA = "min_area"      # 三角形面積の二乗和を最小化
    MAX_ANGLE = "max_angle"    # 最小内角を最大化（最大コサインを最小化）

    @classmethod
    def from_value(cls, value: Union["Objective", str]) -> "Objective":
        """列挙値または文字列から目的関数を取得"""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().lower()
            for member in cls:
                if member.value == key or member.name.lower() == key:
                    return member
        raise ValueError(f"Unknown triangulation objective: {value!r}")


# =============================================================================
# 処理結果
# =============================================================================

class FaceStatus(Enum):
    """面ごとの三角形分割結果"""
    TRIANGULATED = "triangulated"          # n-2 個の三角形に分割済み
    ALREADY_TRIANGLE = "already_triangle"  # n <= 3 のため処理不要
    NON_MANIFOLD = "non_manifold"          # 非多様体頂点を含むためスキップ
    INCOMPLETE = "incomplete"              # 対角線挿入が途中で失敗
    FAILED = "failed"                      # 予期しない例外


@dataclass
class TriangulationReport:
    """メッシュ全体の三角形分割レポート"""
    faces_processed: int = 0
    faces_triangulated: int = 0
    faces_skipped: int = 0
    faces_non_manifold: int = 0
    faces_incomplete: int = 0
    faces_failed: int = 0
    edges_inserted: int = 0
    elapsed_ms: float = 0.0
    status_by_face: Dict[int, FaceStatus] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        """全ての面が分割済みまたは処理不要か"""
        return (
            self.faces_non_manifold == 0
            and self.faces_incomplete == 0
            and self.faces_failed == 0
        )

    def record(self, face: int, status: FaceStatus) -> None:
        """面の結果をカウントに反映"""
        self.faces_processed += 1
        self.status_by_face[face] = status
        if status is FaceStatus.TRIANGULATED:
            self.faces_triangulated += 1
        elif status is FaceStatus.ALREADY_TRIANGLE:
            self.faces_skipped += 1
        elif status is FaceStatus.NON_MANIFOLD:
            self.faces_non_manifold += 1
        elif status is FaceStatus.INCOMPLETE:
            self.faces_incomplete += 1
        else:
            self.faces_failed += 1
