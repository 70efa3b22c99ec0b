#!/usr/bin/env python3
"""
PNG rendering of finished mazes with OpenCV
"""

import base64

import cv2
import numpy as np

from maze_generator import MazeGrid

# BGR colors
COLORS = {
    'background': (0, 0, 0),
    'wall': (0, 0, 255),
    'border': (68, 68, 68),
    'start': (0, 255, 255),
    'goal': (0, 255, 0),
}


def render_maze_image(grid: MazeGrid, cell_size: int = 20, wall_width: int = 2) -> np.ndarray:
    """Draw closed walls, the border, the ball's start cell and the goal"""
    height = grid.rows * cell_size
    width = grid.cols * cell_size
    img = np.zeros((height + 1, width + 1, 3), dtype=np.uint8)
    img[:, :] = COLORS['background']

    # Start (0,0) and goal (bottom-right), drawn first so walls stay on top
    cv2.circle(img, (cell_size // 2, cell_size // 2), max(1, cell_size // 4), COLORS['start'], -1)
    inset = int(cell_size * 0.15)
    goal_x = (grid.cols - 1) * cell_size
    goal_y = (grid.rows - 1) * cell_size
    cv2.rectangle(img, (goal_x + inset, goal_y + inset),
                  (goal_x + cell_size - inset, goal_y + cell_size - inset), COLORS['goal'], -1)

    for r, c in grid.closed_horizontal_walls():
        y = (r + 1) * cell_size
        cv2.line(img, (c * cell_size, y), ((c + 1) * cell_size, y), COLORS['wall'], wall_width)

    for r, c in grid.closed_vertical_walls():
        x = (c + 1) * cell_size
        cv2.line(img, (x, r * cell_size), (x, (r + 1) * cell_size), COLORS['wall'], wall_width)

    cv2.rectangle(img, (0, 0), (width, height), COLORS['border'], wall_width)
    return img


def encode_png(img: np.ndarray) -> bytes:
    ok, buffer = cv2.imencode('.png', img)
    if not ok:
        raise ValueError("PNG encoding failed")
    return buffer.tobytes()


def encode_png_data_url(img: np.ndarray) -> str:
    return f"data:image/png;base64,{base64.b64encode(encode_png(img)).decode()}"
