#!/usr/bin/env python3
"""
Tests for PNG rendering of mazes
"""
import base64
import random

import cv2
import numpy as np

from maze_generator import MazeGrid, generate
from maze_image import COLORS, encode_png_data_url, render_maze_image


def test_image_size_follows_grid():
    img = render_maze_image(generate(5, 8, random.Random(1)), cell_size=10)
    assert img.shape == (51, 81, 3)
    assert img.dtype == np.uint8


def test_closed_and_open_walls_drawn_correctly():
    grid = MazeGrid.empty(1, 2)
    closed = render_maze_image(grid, cell_size=20, wall_width=1)
    # Middle of the wall between the two cells
    assert tuple(closed[10, 20]) == COLORS['wall']

    grid.vertical_open[0, 0] = True
    opened = render_maze_image(grid, cell_size=20, wall_width=1)
    assert tuple(opened[10, 20]) == COLORS['background']


def test_data_url_round_trips_to_image():
    img = render_maze_image(generate(3, 3, random.Random(2)))
    url = encode_png_data_url(img)
    assert url.startswith('data:image/png;base64,')

    raw = base64.b64decode(url.split(',', 1)[1])
    decoded = cv2.imdecode(np.frombuffer(raw, dtype=np.uint8), cv2.IMREAD_COLOR)
    assert np.array_equal(decoded, img)


def test_matplotlib_renderer_draws_each_closed_wall():
    import matplotlib
    matplotlib.use('Agg')
    import matplotlib.pyplot as plt
    from maze_generator import MazeRenderer

    grid = generate(4, 4, random.Random(6))
    fig, ax = plt.subplots()
    try:
        MazeRenderer(grid).render(ax)
        closed = len(grid.closed_horizontal_walls()) + len(grid.closed_vertical_walls())
        # One line per closed wall plus the outer boundary
        assert len(ax.lines) == closed + 1
        assert len(ax.patches) == 2
    finally:
        plt.close(fig)
