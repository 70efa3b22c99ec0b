#!/usr/bin/env python3
"""
Game configuration for the Physics Maze Game
Read once at startup from environment variables, never re-read
"""

import os
from dataclasses import dataclass, field, replace, asdict
from datetime import timedelta
from typing import Any, Dict, Optional

from error_handling import InvalidMazeConfigError

# --- Per-tag render styles ---
DEFAULT_STYLES = {
    'wall': {'fill': '#FF0000', 'stroke': '#FFFFFF', 'line_width': 1, 'visible': True},
    'goal': {'fill': '#00FF00', 'stroke': '#FFFFFF', 'line_width': 1, 'visible': True},
    'ball': {'fill': 'yellow', 'stroke': '#000000', 'line_width': 2, 'visible': True},
    'boundary': {'fill': '#444444', 'stroke': '#444444', 'line_width': 1, 'visible': True},
}


def _default_styles() -> Dict[str, Dict[str, Any]]:
    return {tag: dict(style) for tag, style in DEFAULT_STYLES.items()}


@dataclass(frozen=True)
class GameConfig:
    """Grid, viewport, physics and server settings"""
    # Grid
    rows: int = 20
    cols: int = 20
    seed: Optional[int] = None

    # Viewport (pixels); cell size is derived from these
    width: int = 800
    height: int = 800

    # Colliders
    wall_thickness: float = 5.0
    boundary_thickness: float = 2.0
    goal_scale: float = 0.7
    ball_radius_ratio: float = 0.25

    # Physics, in px and seconds. 300 px/s is 5 px per 60 Hz tick
    move_force: float = 300.0
    damping: float = 0.55
    win_gravity: float = 1000.0
    timestep: float = 1.0 / 60.0
    max_catchup_steps: int = 15

    # Server
    host: str = '127.0.0.1'
    port: int = 8080
    log_dir: str = 'logs'
    log_level: str = 'INFO'
    session_lifetime: timedelta = timedelta(minutes=30)

    styles: Dict[str, Dict[str, Any]] = field(default_factory=_default_styles)

    @property
    def cell_width(self) -> float:
        return self.width / self.cols

    @property
    def cell_height(self) -> float:
        return self.height / self.rows

    def style_for(self, tag: str) -> Dict[str, Any]:
        return dict(self.styles.get(tag, {}))

    def validate(self) -> 'GameConfig':
        """Reject dimensions and physics settings a maze can't be built from"""
        if not isinstance(self.rows, int) or not isinstance(self.cols, int):
            raise InvalidMazeConfigError(f"Grid dimensions must be integers, got {self.rows!r}x{self.cols!r}")
        if self.rows < 1 or self.cols < 1:
            raise InvalidMazeConfigError(f"Grid dimensions must be positive, got {self.rows}x{self.cols}")
        if self.width <= 0 or self.height <= 0:
            raise InvalidMazeConfigError(f"Viewport must be positive, got {self.width}x{self.height}")
        if self.move_force <= 0:
            raise InvalidMazeConfigError(f"move_force must be positive, got {self.move_force}")
        if self.timestep <= 0 or self.max_catchup_steps < 1:
            raise InvalidMazeConfigError("timestep and max_catchup_steps must be positive")
        if not 0 < self.damping <= 1:
            raise InvalidMazeConfigError(f"damping must be in (0, 1], got {self.damping}")
        return self

    def with_overrides(self, **overrides) -> 'GameConfig':
        """Copy with the given fields replaced; None values are ignored"""
        changes = {k: v for k, v in overrides.items() if v is not None}
        unknown = set(changes) - set(self.__dataclass_fields__)
        if unknown:
            raise InvalidMazeConfigError(f"Unknown config fields: {sorted(unknown)}")
        return replace(self, **changes).validate()

    def public_view(self) -> Dict[str, Any]:
        """Subset of the config the browser needs"""
        return {
            'rows': self.rows,
            'cols': self.cols,
            'width': self.width,
            'height': self.height,
            'cell_width': self.cell_width,
            'cell_height': self.cell_height,
            'styles': self.styles,
        }

    def as_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['session_lifetime'] = self.session_lifetime.total_seconds()
        return data

    @classmethod
    def from_env(cls, environ=None) -> 'GameConfig':
        """Build config from MAZE_* environment variables"""
        env = os.environ if environ is None else environ

        def read(name, cast, default):
            raw = env.get(name)
            if raw is None or raw == '':
                return default
            try:
                return cast(raw)
            except ValueError:
                raise InvalidMazeConfigError(f"{name}={raw!r} is not a valid {cast.__name__}")

        defaults = cls()
        return cls(
            rows=read('MAZE_ROWS', int, defaults.rows),
            cols=read('MAZE_COLS', int, defaults.cols),
            seed=read('MAZE_SEED', int, None),
            width=read('MAZE_WIDTH', int, defaults.width),
            height=read('MAZE_HEIGHT', int, defaults.height),
            move_force=read('MAZE_MOVE_FORCE', float, defaults.move_force),
            host=read('MAZE_HOST', str, defaults.host),
            port=read('MAZE_PORT', int, defaults.port),
            log_dir=read('MAZE_LOG_DIR', str, defaults.log_dir),
            log_level=read('MAZE_LOG_LEVEL', str, defaults.log_level),
        ).validate()
