#!/usr/bin/env python3
"""
Tests for turning maze walls into colliders
"""
import random

import pytest

from maze_config import GameConfig
from maze_generator import MazeGrid, generate
from wall_materializer import materialize


class RecordingWorld:
    """Stands in for the physics world and records every request"""
    def __init__(self):
        self.rectangles = []
        self.circles = []

    def add_static_rectangle(self, center_x, center_y, width, height, tag, style=None):
        record = {'x': center_x, 'y': center_y, 'width': width, 'height': height,
                  'tag': tag, 'style': style}
        self.rectangles.append(record)
        return record

    def add_dynamic_circle(self, center_x, center_y, radius, tag, style=None):
        record = {'x': center_x, 'y': center_y, 'radius': radius, 'tag': tag, 'style': style}
        self.circles.append(record)
        return record

    def tagged(self, tag):
        return [r for r in self.rectangles if r['tag'] == tag]


def test_one_collider_per_closed_wall():
    """Interior walls minus open ones"""
    config = GameConfig(rows=20, cols=20, width=800, height=800)
    grid = generate(20, 20, random.Random(8))
    world = RecordingWorld()

    maze = materialize(grid, config, world)

    interior_walls = 20 * 19 + 19 * 20
    expected = interior_walls - (20 * 20 - 1)
    assert len(world.tagged('wall')) == expected
    assert len(maze.walls) == expected
    assert len(world.tagged('boundary')) == 4
    assert len(world.tagged('goal')) == 1
    assert len(world.circles) == 1


def test_wall_positions_and_sizes():
    """Walls sit on cell edges; cell size comes from width/cols and height/rows"""
    config = GameConfig(rows=2, cols=2, width=200, height=100)
    grid = MazeGrid.empty(2, 2)
    world = RecordingWorld()

    materialize(grid, config, world)
    walls = world.tagged('wall')

    horizontal = [w for w in walls if w['height'] == config.wall_thickness]
    vertical = [w for w in walls if w['width'] == config.wall_thickness]
    assert len(horizontal) == 2 and len(vertical) == 2

    assert {(w['x'], w['y']) for w in horizontal} == {(50.0, 50.0), (150.0, 50.0)}
    assert all(w['width'] == 100.0 for w in horizontal)

    assert {(w['x'], w['y']) for w in vertical} == {(100.0, 25.0), (100.0, 75.0)}
    assert all(w['height'] == 50.0 for w in vertical)


def test_open_walls_are_skipped():
    config = GameConfig(rows=2, cols=2, width=200, height=200)
    grid = MazeGrid.empty(2, 2)
    grid.vertical_open[:, :] = True
    grid.horizontal_open[0, 1] = True
    world = RecordingWorld()

    materialize(grid, config, world)
    walls = world.tagged('wall')
    assert len(walls) == 1
    assert (walls[0]['x'], walls[0]['y']) == (50.0, 100.0)


def test_boundaries_frame_the_viewport():
    config = GameConfig(rows=3, cols=3, width=300, height=150)
    world = RecordingWorld()
    materialize(MazeGrid.empty(3, 3), config, world)

    boundaries = {(b['x'], b['y'], b['width'], b['height']) for b in world.tagged('boundary')}
    assert boundaries == {
        (150, 0, 300, 2.0),
        (150, 150, 300, 2.0),
        (0, 75, 2.0, 150),
        (300, 75, 2.0, 150),
    }


def test_goal_and_ball_placement():
    """Goal in the far corner cell, ball in the first cell"""
    config = GameConfig(rows=4, cols=5, width=500, height=400)
    world = RecordingWorld()
    maze = materialize(MazeGrid.empty(4, 5), config, world)

    assert maze.goal['x'] == 450 and maze.goal['y'] == 350
    assert maze.goal['width'] == pytest.approx(70) and maze.goal['height'] == pytest.approx(70)

    assert (maze.ball['x'], maze.ball['y']) == (50, 50)
    assert maze.ball['radius'] == 25
    assert maze.ball['tag'] == 'ball'


def test_styles_follow_tags():
    config = GameConfig(rows=2, cols=2)
    world = RecordingWorld()
    materialize(MazeGrid.empty(2, 2), config, world)

    assert world.tagged('wall')[0]['style']['fill'] == '#FF0000'
    assert world.tagged('goal')[0]['style']['fill'] == '#00FF00'
    assert world.circles[0]['style'] == {'fill': 'yellow', 'stroke': '#000000',
                                         'line_width': 2, 'visible': True}


def test_mismatched_grid_rejected():
    with pytest.raises(ValueError):
        materialize(MazeGrid.empty(3, 3), GameConfig(rows=4, cols=4), RecordingWorld())
