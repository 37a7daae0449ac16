#!/usr/bin/env python3
"""
facetri メインパッケージ

ハーフエッジメッシュの多角形面を、面積または角度を目的関数とする
動的計画法で最適に三角形分割します。

ロギング:
    各モジュールは get_logger(__name__) で "facetri.*" 配下のロガーを取得する。
    面ごとの非多様体・未完了の警告と、メッシュ全体の集計はこのロガーに出力される。
    import 時に INFO レベルのコンソール出力を1つだけ設定する。
"""

import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional

# プロジェクト情報
__version__ = "0.1.0"
__author__ = "facetri Development Team"

# フォーマットスタイル -> ログ書式
_LOG_FORMATS: Dict[str, str] = {
    "simple": "%(levelname)s: %(message)s",
    "detailed": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    "debug": "%(asctime)s [%(levelname)s] %(name)s:%(funcName)s:%(lineno)d: %(message)s",
}

# setup_logging が追加したハンドラー（再設定時にこれだけを外す）
_installed_handlers: List[logging.Handler] = []
_default_logging_applied = False


def _make_handler(handler: logging.Handler, level: int, formatter: logging.Formatter) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    _installed_handlers.append(handler)
    return handler


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    format_style: str = "detailed"
) -> logging.Logger:
    """
    三角形分割のログ出力先とレベルを設定

    再呼び出し時は前回追加したハンドラーだけを置き換えるため、
    利用側やテストランナーが登録したハンドラーはそのまま残る。

    Args:
        level: ログレベル名 (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: 追加で書き出すログファイル（None ならコンソールのみ）
        format_style: "simple" / "detailed" / "debug"（不明な値は detailed）

    Returns:
        設定済みルートロガー

    Raises:
        ValueError: 不明なログレベル名
    """
    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f'Invalid log level: {level}')

    formatter = logging.Formatter(
        _LOG_FORMATS.get(format_style, _LOG_FORMATS["detailed"]), datefmt='%H:%M:%S'
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    for handler in _installed_handlers:
        root_logger.removeHandler(handler)
        handler.close()
    _installed_handlers.clear()

    root_logger.addHandler(_make_handler(logging.StreamHandler(sys.stdout), numeric_level, formatter))
    if log_file is not None:
        root_logger.addHandler(_make_handler(logging.FileHandler(log_file), numeric_level, formatter))

    return root_logger


def get_logger(name: str) -> logging.Logger:
    """モジュール用ロガー（通常は __name__ を渡す）"""
    return logging.getLogger(name)


def ensure_default_logging() -> None:
    """初回 import 時のみ既定のコンソール出力を設定"""
    global _default_logging_applied
    if not _default_logging_applied:
        setup_logging(level="INFO", format_style="detailed")
        _default_logging_applied = True


ensure_default_logging()
