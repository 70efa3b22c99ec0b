#!/usr/bin/env python3
"""
Maze Generator using the Recursive Backtracking Algorithm
- Randomized depth-first search over a rows x cols grid
- Produces a spanning tree of open walls (a perfect maze)
- Renders to a matplotlib window when run directly
"""

import logging
import random
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

import matplotlib.pyplot as plt
import numpy as np

from error_handling import InvalidMazeConfigError

logger = logging.getLogger('maze_game.generator')

# Canonical neighbor order; "up" decreases the row index
UP = 'up'
RIGHT = 'right'
DOWN = 'down'
LEFT = 'left'
DIRECTIONS = (
    (UP, -1, 0),
    (RIGHT, 0, 1),
    (DOWN, 1, 0),
    (LEFT, 0, -1),
)

_default_rng = random.Random()


@dataclass
class MazeGrid:
    """Visited flags plus the two wall-open matrices of a maze"""
    rows: int
    cols: int
    visited: np.ndarray
    vertical_open: np.ndarray
    horizontal_open: np.ndarray
    start: Tuple[int, int] = (0, 0)

    @classmethod
    def empty(cls, rows: int, cols: int) -> 'MazeGrid':
        """All cells unvisited, every wall closed"""
        return cls(
            rows=rows,
            cols=cols,
            visited=np.zeros((rows, cols), dtype=bool),
            vertical_open=np.zeros((rows, cols - 1), dtype=bool),
            horizontal_open=np.zeros((rows - 1, cols), dtype=bool),
        )

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    def open_wall(self, row: int, col: int, direction: str):
        """Open the wall between (row, col) and its neighbor in direction"""
        if direction == LEFT:
            self.vertical_open[row, col - 1] = True
        elif direction == RIGHT:
            self.vertical_open[row, col] = True
        elif direction == UP:
            self.horizontal_open[row - 1, col] = True
        elif direction == DOWN:
            self.horizontal_open[row, col] = True
        else:
            raise ValueError(f"Unknown direction {direction!r}")

    def is_open(self, row: int, col: int, direction: str) -> bool:
        """True if there is a passage from (row, col) towards direction"""
        if direction == LEFT:
            return col > 0 and bool(self.vertical_open[row, col - 1])
        if direction == RIGHT:
            return col < self.cols - 1 and bool(self.vertical_open[row, col])
        if direction == UP:
            return row > 0 and bool(self.horizontal_open[row - 1, col])
        if direction == DOWN:
            return row < self.rows - 1 and bool(self.horizontal_open[row, col])
        raise ValueError(f"Unknown direction {direction!r}")

    def open_wall_count(self) -> int:
        return int(self.vertical_open.sum() + self.horizontal_open.sum())

    def closed_vertical_walls(self) -> List[Tuple[int, int]]:
        return [(int(r), int(c)) for r, c in np.argwhere(~self.vertical_open)]

    def closed_horizontal_walls(self) -> List[Tuple[int, int]]:
        return [(int(r), int(c)) for r, c in np.argwhere(~self.horizontal_open)]


def shuffle(items: list, rng=None) -> list:
    """Fisher-Yates shuffle in place; returns the same list"""
    rng = rng or _default_rng
    for i in range(len(items) - 1, 0, -1):
        j = int(rng.random() * (i + 1))
        items[i], items[j] = items[j], items[i]
    return items


def _shuffled_neighbors(row: int, col: int, rng, shuffle_fn: Callable) -> List[Tuple[int, int, str]]:
    neighbors = [(row + dr, col + dc, direction) for direction, dr, dc in DIRECTIONS]
    return list(shuffle_fn(neighbors, rng))


def generate(rows: int, cols: int, rng=None, *, start: Optional[Tuple[int, int]] = None,
             shuffle_fn: Callable = shuffle) -> MazeGrid:
    """Generate a perfect maze by randomized depth-first search.

    The walk uses an explicit stack of (row, col, pending neighbors) frames.
    A cell's neighbors are shuffled when it is entered and a frame is only
    resumed once everything reachable through its current neighbor is done,
    so random draws are consumed in the same order as the recursive
    backtracker and mazes come out identical for the same random sequence.
    """
    if not isinstance(rows, int) or not isinstance(cols, int) or rows < 1 or cols < 1:
        raise InvalidMazeConfigError(f"Maze dimensions must be positive integers, got {rows!r}x{cols!r}")

    rng = rng or _default_rng
    if start is None:
        start = (int(rng.random() * rows), int(rng.random() * cols))
    if not (0 <= start[0] < rows and 0 <= start[1] < cols):
        raise InvalidMazeConfigError(f"Start cell {start} outside {rows}x{cols} grid")

    grid = MazeGrid.empty(rows, cols)
    grid.start = (int(start[0]), int(start[1]))

    start_row, start_col = grid.start
    grid.visited[start_row, start_col] = True
    stack = [(start_row, start_col, iter(_shuffled_neighbors(start_row, start_col, rng, shuffle_fn)))]

    while stack:
        row, col, pending = stack[-1]
        neighbor = next(pending, None)
        if neighbor is None:
            stack.pop()
            continue

        next_row, next_col, direction = neighbor
        # Skip out-of-bounds and visited neighbors
        if not grid.in_bounds(next_row, next_col):
            continue
        if grid.visited[next_row, next_col]:
            continue

        grid.open_wall(row, col, direction)
        grid.visited[next_row, next_col] = True
        stack.append((next_row, next_col,
                      iter(_shuffled_neighbors(next_row, next_col, rng, shuffle_fn))))

    logger.debug(f"Generated {rows}x{cols} maze from {grid.start} "
                 f"with {grid.open_wall_count()} open walls")
    return grid


class MazeRenderer:
    """Renders a maze to a matplotlib axes"""

    def __init__(self, grid: MazeGrid, cell_size: float = 1.0):
        self.grid = grid
        self.cell_size = cell_size

        # Colors
        self.colors = {
            'background': 'black',
            'wall': 'red',
            'start': 'yellow',
            'goal': 'green',
        }

    def draw_walls(self, ax):
        """Draw every closed wall segment"""
        size = self.cell_size
        for r, c in self.grid.closed_horizontal_walls():
            y = (r + 1) * size
            ax.plot([c * size, (c + 1) * size], [y, y], color=self.colors['wall'], linewidth=2)

        for r, c in self.grid.closed_vertical_walls():
            x = (c + 1) * size
            ax.plot([x, x], [r * size, (r + 1) * size], color=self.colors['wall'], linewidth=2)

    def draw_outer_boundary(self, ax):
        width = self.grid.cols * self.cell_size
        height = self.grid.rows * self.cell_size
        ax.plot([0, width, width, 0, 0], [0, 0, height, height, 0],
                color=self.colors['wall'], linewidth=3)

    def draw_start_goal(self, ax):
        """Highlight the ball's start cell and the goal cell"""
        size = self.cell_size
        ax.add_patch(plt.Circle((size / 2, size / 2), size / 4, color=self.colors['start']))
        goal_x = (self.grid.cols - 1) * size + 0.15 * size
        goal_y = (self.grid.rows - 1) * size + 0.15 * size
        ax.add_patch(plt.Rectangle((goal_x, goal_y), 0.7 * size, 0.7 * size,
                                   color=self.colors['goal']))

    def render(self, ax):
        """Render complete maze to axes"""
        ax.clear()
        ax.set_facecolor(self.colors['background'])

        self.draw_outer_boundary(ax)
        self.draw_walls(ax)
        self.draw_start_goal(ax)

        # Screen coordinates: row 0 at the top
        ax.set_aspect('equal')
        ax.set_xlim(-0.5, self.grid.cols * self.cell_size + 0.5)
        ax.set_ylim(self.grid.rows * self.cell_size + 0.5, -0.5)
        ax.set_title(f"{self.grid.rows}x{self.grid.cols} Maze - Recursive Backtracking\n"
                     f"Generation started at {self.grid.start}")


def main():
    """Generate a maze and display it; SPACE generates a new one"""
    from maze_config import GameConfig

    config = GameConfig.from_env()
    rng = random.Random(config.seed)

    print(f"Generating {config.rows}x{config.cols} maze using Recursive Backtracking...")
    grid = generate(config.rows, config.cols, rng)
    print("Press SPACE to generate new maze, Close window to exit")

    renderer = MazeRenderer(grid)
    fig, ax = plt.subplots(figsize=(10, 10))

    def on_key(event):
        if event.key == ' ':
            print("Generating new maze...")
            renderer.grid = generate(config.rows, config.cols, rng)
            renderer.render(ax)
            plt.draw()

    fig.canvas.mpl_connect('key_press_event', on_key)

    renderer.render(ax)
    plt.show()


if __name__ == "__main__":
    main()
