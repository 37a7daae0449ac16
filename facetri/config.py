#!/usr/bin/env python3
"""
facetri 設定管理システム

三角形分割の目的関数・検証ポリシー・ロギング設定を統一管理し、
YAMLファイルからの読み込みと保存を提供します。
"""

import yaml
from dataclasses import dataclass, field, asdict
from typing import Optional, Dict, Any
from pathlib import Path

from facetri import get_logger, setup_logging
from facetri.constants import (
    DEFAULT_CONFIG_FILENAME,
    DEFAULT_OBJECTIVE,
    DEFAULT_REJECT_INTERIOR_EDGES,
)
from facetri.data_types import Objective

logger = get_logger(__name__)


@dataclass
class TriangulationConfig:
    """三角形分割設定"""
    # 目的関数 ("min_area" / "max_angle")
    objective: str = DEFAULT_OBJECTIVE

    # 既存の内部エッジを再利用する候補も拒否するか
    reject_interior_edges: bool = DEFAULT_REJECT_INTERIOR_EDGES

    # メッシュ全体処理の後に統計をログ出力するか
    log_statistics: bool = True

    def get_objective(self) -> Objective:
        """目的関数を列挙値で取得"""
        return Objective.from_value(self.objective)


@dataclass
class FacetriConfig:
    """プロジェクト全体設定"""
    triangulation: TriangulationConfig = field(default_factory=TriangulationConfig)

    # ログ設定
    log_level: str = "INFO"
    log_format_style: str = "detailed"


class ConfigManager:
    """設定管理クラス"""

    def __init__(self):
        self._config: Optional[FacetriConfig] = None
        self._config_file_path: Optional[Path] = None

    def load_config(self, config_file: Optional[Path] = None) -> FacetriConfig:
        """
        設定ファイルを読み込み

        Args:
            config_file: 設定ファイルパス（Noneの場合はデフォルト設定）

        Returns:
            読み込まれた設定
        """
        if config_file is None:
            # デフォルト設定ファイルを探す
            default_paths = [
                Path.cwd() / DEFAULT_CONFIG_FILENAME,
                Path.cwd() / "config.yaml",
                Path.home() / ".facetri" / "config.yaml"
            ]

            for path in default_paths:
                if path.exists():
                    config_file = path
                    break

        if config_file and Path(config_file).exists():
            config_file = Path(config_file)
            try:
                with open(config_file, 'r', encoding='utf-8') as f:
                    config_dict = yaml.safe_load(f) or {}

                self._config = self._dict_to_config(config_dict)
                self._config_file_path = config_file
                logger.info(f"Configuration loaded from {config_file}")

            except (OSError, yaml.YAMLError, ValueError, TypeError) as e:
                logger.warning(f"Failed to load config from {config_file}: {e}")
                logger.info("Using default configuration")
                self._config = FacetriConfig()
        else:
            logger.info("No config file found, using default configuration")
            self._config = FacetriConfig()

        return self._config

    def save_config(self, config_file: Optional[Path] = None) -> bool:
        """
        設定をファイルに保存

        Args:
            config_file: 保存先ファイルパス

        Returns:
            保存成功したかどうか
        """
        if self._config is None:
            logger.error("No configuration to save")
            return False

        if config_file is None:
            config_file = self._config_file_path or Path(DEFAULT_CONFIG_FILENAME)
        config_file = Path(config_file)

        try:
            config_dict = self._config_to_dict(self._config)

            # ディレクトリが存在しない場合は作成
            config_file.parent.mkdir(parents=True, exist_ok=True)

            with open(config_file, 'w', encoding='utf-8') as f:
                yaml.dump(config_dict, f, default_flow_style=False,
                         allow_unicode=True, indent=2)

            logger.info(f"Configuration saved to {config_file}")
            return True

        except OSError as e:
            logger.error(f"Failed to save config to {config_file}: {e}")
            return False

    def get_config(self) -> FacetriConfig:
        """現在の設定を取得"""
        if self._config is None:
            self._config = self.load_config()
        return self._config

    def set_config(self, config: FacetriConfig) -> None:
        """設定を差し替え"""
        self._config = config

    def _dict_to_config(self, config_dict: Dict[str, Any]) -> FacetriConfig:
        """辞書を設定オブジェクトに変換"""
        if not isinstance(config_dict, dict):
            raise TypeError("Configuration root must be a mapping")

        config = FacetriConfig()

        section = config_dict.get('triangulation')
        if isinstance(section, dict):
            for key, value in section.items():
                if hasattr(config.triangulation, key):
                    setattr(config.triangulation, key, value)
                else:
                    logger.debug(f"Ignoring unknown triangulation option: {key}")

        for key in ('log_level', 'log_format_style'):
            if key in config_dict:
                setattr(config, key, config_dict[key])

        # 目的関数名を検証（不正値は ValueError）
        config.triangulation.get_objective()

        return config

    def _config_to_dict(self, config: FacetriConfig) -> Dict[str, Any]:
        """設定オブジェクトを辞書に変換"""
        return asdict(config)


# グローバル設定マネージャー
_config_manager: Optional[ConfigManager] = None

def get_config_manager() -> ConfigManager:
    """グローバル設定マネージャーを取得"""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager

def get_config() -> FacetriConfig:
    """現在の設定を取得"""
    return get_config_manager().get_config()

def load_config(config_file: Optional[Path] = None) -> FacetriConfig:
    """設定を読み込み"""
    return get_config_manager().load_config(config_file)

def save_config(config_file: Optional[Path] = None) -> bool:
    """設定を保存"""
    return get_config_manager().save_config(config_file)

def configure_logging(config: Optional[FacetriConfig] = None) -> None:
    """設定のログレベル・フォーマットをルートロガーに適用"""
    if config is None:
        config = get_config()
    setup_logging(level=config.log_level, format_style=config.log_format_style)
    logger.debug(f"Logging configured: level={config.log_level}, style={config.log_format_style}")
