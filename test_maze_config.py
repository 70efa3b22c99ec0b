#!/usr/bin/env python3
"""
Tests for game configuration and startup validation
"""
import pytest

from error_handling import InvalidMazeConfigError
from maze_config import GameConfig
from startup_validation import SystemValidator


def test_defaults_match_reference_game():
    config = GameConfig()
    assert (config.rows, config.cols) == (20, 20)
    assert config.cell_width == 40
    assert config.wall_thickness == 5
    assert config.move_force == pytest.approx(5 * 60)
    assert config.style_for('wall')['fill'] == '#FF0000'


def test_from_env():
    config = GameConfig.from_env({
        'MAZE_ROWS': '10',
        'MAZE_COLS': '12',
        'MAZE_WIDTH': '1200',
        'MAZE_HEIGHT': '600',
        'MAZE_SEED': '42',
        'MAZE_PORT': '9000',
    })
    assert (config.rows, config.cols) == (10, 12)
    assert config.seed == 42
    assert config.port == 9000
    assert config.cell_width == 100
    assert config.cell_height == 60


def test_from_env_ignores_empty_values():
    config = GameConfig.from_env({'MAZE_ROWS': '', 'MAZE_SEED': ''})
    assert config.rows == 20
    assert config.seed is None


@pytest.mark.parametrize("env", [
    {'MAZE_ROWS': '0'},
    {'MAZE_COLS': '-3'},
    {'MAZE_ROWS': 'many'},
    {'MAZE_WIDTH': '0'},
    {'MAZE_MOVE_FORCE': '-1'},
])
def test_from_env_rejects_bad_values(env):
    with pytest.raises(InvalidMazeConfigError):
        GameConfig.from_env(env)


def test_with_overrides():
    config = GameConfig().with_overrides(rows=5, cols=None)
    assert config.rows == 5
    assert config.cols == 20

    with pytest.raises(InvalidMazeConfigError):
        GameConfig().with_overrides(rows=0)
    with pytest.raises(InvalidMazeConfigError):
        GameConfig().with_overrides(difficulty='hard')


def test_style_for_returns_copy():
    config = GameConfig()
    style = config.style_for('ball')
    style['fill'] = 'blue'
    assert config.style_for('ball')['fill'] == 'yellow'
    assert config.style_for('unknown') == {}


def test_validator_accepts_good_config(tmp_path):
    validator = SystemValidator(GameConfig(log_dir=str(tmp_path)))
    assert validator.run_validation(check_port=False)
    assert validator.errors == []
    assert (tmp_path / 'validation_report.json').exists()


def test_validator_reports_bad_config(tmp_path):
    validator = SystemValidator(GameConfig(rows=0, log_dir=str(tmp_path)))
    assert not validator.run_validation(check_port=False)
    assert any('Invalid configuration' in e for e in validator.errors)


def test_validator_reports_missing_package(tmp_path):
    validator = SystemValidator(GameConfig(log_dir=str(tmp_path)))
    assert not validator.check_python_dependencies(['definitely_not_a_real_package_xyz'])
    assert validator.errors[0].startswith('Missing package')
