#!/usr/bin/env python3
"""
設定管理とロギングのテスト

YAML設定の読み込み・保存、不正値のフォールバック、
設定からの三角形分割器生成を検証します。
"""

import logging
from pathlib import Path

import pytest
import yaml

from facetri import setup_logging
from facetri.config import ConfigManager, FacetriConfig, TriangulationConfig, configure_logging
from facetri.data_types import Objective
from facetri.mesh import create_triangulator
from conftest import cube_mesh


@pytest.fixture
def restore_logging():
    """ルートロガーをテストセッションの設定に戻す"""
    yield
    setup_logging(level="DEBUG")


def test_default_config():
    """デフォルト設定"""
    config = FacetriConfig()
    assert config.triangulation.objective == "min_area"
    assert config.triangulation.get_objective() is Objective.MIN_AREA
    assert config.triangulation.reject_interior_edges is False
    assert config.log_level == "INFO"


def test_load_yaml(temp_directory):
    """YAMLファイルから読み込み、未知のキーは無視"""
    path = Path(temp_directory) / "facetri.yaml"
    path.write_text(yaml.dump({
        'triangulation': {
            'objective': 'max_angle',
            'reject_interior_edges': True,
            'unknown_option': 3,
        },
        'log_level': 'DEBUG',
    }), encoding='utf-8')

    config = ConfigManager().load_config(path)

    assert config.triangulation.get_objective() is Objective.MAX_ANGLE
    assert config.triangulation.reject_interior_edges is True
    assert not hasattr(config.triangulation, 'unknown_option')
    assert config.log_level == 'DEBUG'


def test_save_and_reload(temp_directory):
    """保存した設定を再読み込み"""
    manager = ConfigManager()
    config = FacetriConfig(triangulation=TriangulationConfig(objective="max_angle"))
    manager.set_config(config)

    path = Path(temp_directory) / "nested" / "config.yaml"
    assert manager.save_config(path)
    assert path.exists()

    reloaded = ConfigManager().load_config(path)
    assert reloaded == config


def test_invalid_objective_falls_back(temp_directory):
    """不正な目的関数はデフォルト設定にフォールバック"""
    path = Path(temp_directory) / "facetri.yaml"
    path.write_text("triangulation:\n  objective: smallest\n", encoding='utf-8')

    config = ConfigManager().load_config(path)

    assert config == FacetriConfig()


def test_broken_yaml_falls_back(temp_directory):
    """壊れたYAMLはデフォルト設定にフォールバック"""
    path = Path(temp_directory) / "facetri.yaml"
    path.write_text("triangulation: [unclosed\n", encoding='utf-8')

    assert ConfigManager().load_config(path) == FacetriConfig()


def test_save_without_config():
    """設定がなければ保存しない"""
    assert ConfigManager().save_config(Path("unused.yaml")) is False


def test_create_triangulator_from_config(restore_logging):
    """設定から三角形分割器を生成"""
    config = FacetriConfig(triangulation=TriangulationConfig(
        objective="MAX_ANGLE", reject_interior_edges=True, log_statistics=False
    ))
    mesh = cube_mesh()

    triangulator = create_triangulator(mesh, config)
    assert triangulator.objective is Objective.MAX_ANGLE
    assert triangulator.reject_interior_edges is True
    assert triangulator.log_statistics is False

    # セクション単体も受け付ける
    triangulator = create_triangulator(mesh, TriangulationConfig())
    assert triangulator.objective is Objective.MIN_AREA

    report = triangulator.triangulate()
    assert report.faces_triangulated == 6


def test_configure_logging_from_config(restore_logging):
    """設定のログレベルがルートロガーに反映される"""
    configure_logging(FacetriConfig(log_level="ERROR", log_format_style="simple"))
    assert logging.getLogger().level == logging.ERROR

    # 全体設定から生成すると分割器のログ設定も適用
    create_triangulator(cube_mesh(), FacetriConfig(log_level="WARNING"))
    assert logging.getLogger().level == logging.WARNING

    # セクション単体ではログ設定を変更しない
    create_triangulator(cube_mesh(), TriangulationConfig())
    assert logging.getLogger().level == logging.WARNING

    with pytest.raises(ValueError):
        configure_logging(FacetriConfig(log_level="LOUD"))


def test_setup_logging_levels():
    """ログレベル設定"""
    root = setup_logging(level="WARNING", format_style="simple")
    assert root.level == logging.WARNING
    with pytest.raises(ValueError):
        setup_logging(level="LOUD")
    setup_logging(level="DEBUG")


def test_objective_parsing():
    """目的関数の文字列変換"""
    assert Objective.from_value("min_area") is Objective.MIN_AREA
    assert Objective.from_value(" Max_Angle ") is Objective.MAX_ANGLE
    assert Objective.from_value(Objective.MAX_ANGLE) is Objective.MAX_ANGLE
    with pytest.raises(ValueError):
        Objective.from_value(3)
