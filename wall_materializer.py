#!/usr/bin/env python3
"""
Turns a finished maze into colliders in the physics world
"""

import logging
from dataclasses import dataclass, field
from typing import Any, List

from maze_config import GameConfig
from maze_generator import MazeGrid

logger = logging.getLogger('maze_game.materializer')

WALL_TAG = 'wall'
BOUNDARY_TAG = 'boundary'
GOAL_TAG = 'goal'
BALL_TAG = 'ball'


@dataclass
class MaterializedMaze:
    """Handles returned by the world, grouped by role"""
    boundaries: List[Any] = field(default_factory=list)
    walls: List[Any] = field(default_factory=list)
    goal: Any = None
    ball: Any = None


def add_boundaries(config: GameConfig, world) -> List[Any]:
    """Four thin rectangles framing the play area"""
    width, height = config.width, config.height
    thickness = config.boundary_thickness
    style = config.style_for(BOUNDARY_TAG)
    return [
        world.add_static_rectangle(width / 2, 0, width, thickness, BOUNDARY_TAG, style),
        world.add_static_rectangle(width / 2, height, width, thickness, BOUNDARY_TAG, style),
        world.add_static_rectangle(0, height / 2, thickness, height, BOUNDARY_TAG, style),
        world.add_static_rectangle(width, height / 2, thickness, height, BOUNDARY_TAG, style),
    ]


def add_walls(grid: MazeGrid, config: GameConfig, world) -> List[Any]:
    """One rectangle per wall segment that is not open"""
    unit_x, unit_y = config.cell_width, config.cell_height
    style = config.style_for(WALL_TAG)
    walls = []

    # Horizontal walls sit on the bottom edge of cell (row, col)
    for row, col in grid.closed_horizontal_walls():
        walls.append(world.add_static_rectangle(
            col * unit_x + unit_x / 2,
            row * unit_y + unit_y,
            unit_x,
            config.wall_thickness,
            WALL_TAG, style,
        ))

    # Vertical walls sit on the right edge of cell (row, col)
    for row, col in grid.closed_vertical_walls():
        walls.append(world.add_static_rectangle(
            col * unit_x + unit_x,
            row * unit_y + unit_y / 2,
            config.wall_thickness,
            unit_y,
            WALL_TAG, style,
        ))

    return walls


def materialize(grid: MazeGrid, config: GameConfig, world) -> MaterializedMaze:
    """Register boundary, wall, goal and ball colliders for a finished maze"""
    if (grid.rows, grid.cols) != (config.rows, config.cols):
        raise ValueError(f"Grid is {grid.rows}x{grid.cols} but config expects {config.rows}x{config.cols}")

    unit_x, unit_y = config.cell_width, config.cell_height
    maze = MaterializedMaze()
    maze.boundaries = add_boundaries(config, world)
    maze.walls = add_walls(grid, config, world)

    maze.goal = world.add_static_rectangle(
        config.width - unit_x / 2,
        config.height - unit_y / 2,
        unit_x * config.goal_scale,
        unit_y * config.goal_scale,
        GOAL_TAG, config.style_for(GOAL_TAG),
    )

    maze.ball = world.add_dynamic_circle(
        unit_x / 2,
        unit_y / 2,
        min(unit_x, unit_y) * config.ball_radius_ratio,
        BALL_TAG, config.style_for(BALL_TAG),
    )

    logger.debug(f"Materialized {len(maze.walls)} walls for {grid.rows}x{grid.cols} maze")
    return maze
