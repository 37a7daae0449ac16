#!/usr/bin/env python3
"""
共通定数・設定値

メッシュ構造と三角形分割で共有する定数を一元管理し、
モジュール間の循環依存を解消します。
"""

from typing import Final

# =============================================================================
# ハンドル
# =============================================================================

# 無効なハンドル（頂点・ハーフエッジ・面に共通）
INVALID_HANDLE: Final[int] = -1

# 分割点なし（スプリット表の2角形エントリ）
NO_SPLIT: Final[int] = -1

# =============================================================================
# 数値精度・許容誤差
# =============================================================================

# 正規化時にゼロベクトルとみなすノルム
NORMALIZE_EPSILON: Final[float] = 1e-300

# =============================================================================
# 三角形分割関連
# =============================================================================

# 分割が必要な最小コーナー数（これ未満は三角形以下）
MIN_POLYGON_CORNERS: Final[int] = 4

# デフォルト目的関数
DEFAULT_OBJECTIVE: Final[str] = "min_area"

# 内部エッジを再利用する候補を拒否するか（厳格モード）
DEFAULT_REJECT_INTERIOR_EDGES: Final[bool] = False

# =============================================================================
# 設定ファイル
# =============================================================================

DEFAULT_CONFIG_FILENAME: Final[str] = "facetri.yaml"
