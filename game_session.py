#!/usr/bin/env python3
"""
Game sessions: one generated maze, its physics world and the win state
"""

import hashlib
import logging
import random
import threading
import time
from typing import Callable, Dict, List, Optional, Tuple

from error_handling import GameNotFoundError, InvalidInputError, log_errors
from maze_config import GameConfig
from maze_generator import MazeGrid, generate
from monitoring import maze_logger, monitor_maze_generation, monitor_materialization, monitor_simulation
from physics_world import Entity, PymunkWorld
from wall_materializer import BALL_TAG, GOAL_TAG, WALL_TAG, MaterializedMaze, materialize

logger = logging.getLogger('maze_game.session')

# Key -> (axis, sign); y grows downwards
KEY_BINDINGS = {
    'W': ('y', -1), 'ARROWUP': ('y', -1),
    'S': ('y', 1), 'ARROWDOWN': ('y', 1),
    'A': ('x', -1), 'ARROWLEFT': ('x', -1),
    'D': ('x', 1), 'ARROWRIGHT': ('x', 1),
}


def new_game_id() -> str:
    return hashlib.md5(f"{time.time()}{random.random()}".encode()).hexdigest()[:12]


@monitor_maze_generation
def build_grid(config: GameConfig, rng) -> MazeGrid:
    return generate(config.rows, config.cols, rng)


@monitor_materialization
def build_colliders(grid: MazeGrid, config: GameConfig, world: PymunkWorld) -> MaterializedMaze:
    return materialize(grid, config, world)


def is_ball_goal_pair(entity_a: Entity, entity_b: Entity) -> bool:
    return {entity_a.tag, entity_b.tag} == {BALL_TAG, GOAL_TAG}


class MazeGame:
    """A single maze game: grid, colliders, input and win handling"""

    def __init__(self, config: GameConfig, rng=None, game_id: Optional[str] = None,
                 clock: Callable[[], float] = time.monotonic):
        self.config = config.validate()
        self.id = game_id or new_game_id()
        self.rng = rng or random.Random(config.seed)
        self.clock = clock
        self.lock = threading.RLock()

        self.grid = build_grid(config, self.rng)
        self.world = PymunkWorld(damping=config.damping, gravity=0.0)
        self.maze = build_colliders(self.grid, config, self.world)
        self.world.on_collision_start(self.handle_collision_start)

        self.won = False
        self.won_at: Optional[float] = None
        self.win_listeners: List[Callable[['MazeGame'], None]] = []

        self.created_at = clock()
        self.last_advance = self.created_at
        self.last_seen = time.time()

    @property
    def ball(self) -> Entity:
        return self.maze.ball

    # --- Input ---

    def handle_key(self, key: str) -> Tuple[float, float]:
        """Push the ball along the pressed axis; the other axis keeps its velocity"""
        if not isinstance(key, str):
            raise InvalidInputError(f"Key must be a string, got {type(key).__name__}")
        binding = KEY_BINDINGS.get(key.upper())
        if binding is None:
            raise InvalidInputError(f"Unsupported key {key!r}")

        axis, sign = binding
        with self.lock:
            x, y = self.world.velocity(self.ball)
            if axis == 'x':
                x += sign * self.config.move_force
            else:
                y += sign * self.config.move_force
            self.world.set_velocity(self.ball, (x, y))
            self.last_seen = time.time()
        return (x, y)

    # --- Collisions and winning ---

    def handle_collision_start(self, pairs: List[Tuple[Entity, Entity]]) -> bool:
        """Start the win sequence if the ball touched the goal; True if it ran now"""
        if not any(is_ball_goal_pair(a, b) for a, b in pairs):
            return False
        if self.won:
            logger.debug(f"Game {self.id}: ball touched goal again after win")
            return False
        self._win()
        return True

    def _win(self):
        self.won = True
        self.won_at = self.clock()

        # Celebrate: gravity on, walls fall
        self.world.set_gravity(self.config.win_gravity)
        walls = self.world.entities(WALL_TAG)
        for wall in walls:
            self.world.set_static(wall, False)

        maze_logger.log_game_event('game_won', {
            'game_id': self.id,
            'solve_time': round(self.elapsed(), 3),
            'released_walls': len(walls)
        })
        for listener in self.win_listeners:
            listener(self)

    # --- Simulation ---

    @monitor_simulation
    def advance(self, now: Optional[float] = None) -> int:
        """Step the world in fixed timesteps up to now; returns steps taken"""
        with self.lock:
            now = self.clock() if now is None else now
            timestep = self.config.timestep
            due = int((now - self.last_advance) / timestep)
            if due <= 0:
                return 0

            steps = min(due, self.config.max_catchup_steps)
            for _ in range(steps):
                self.world.step(timestep)

            if due > steps:
                # Drop the backlog rather than fast-forwarding
                self.last_advance = now
            else:
                self.last_advance += steps * timestep
            self.last_seen = time.time()
            return steps

    def elapsed(self) -> float:
        end = self.won_at if self.won_at is not None else self.clock()
        return end - self.created_at

    # --- Views ---

    def describe(self) -> Dict:
        """Everything the browser needs to draw the game from scratch"""
        with self.lock:
            return {
                'game_id': self.id,
                'config': self.config.public_view(),
                'start_cell': list(self.grid.start),
                'goal_cell': [self.grid.rows - 1, self.grid.cols - 1],
                'entities': [self.world.snapshot(e) for e in self.world.entities()],
                'won': self.won,
            }

    def state(self) -> Dict:
        """Win flag plus every body that can move"""
        with self.lock:
            return {
                'game_id': self.id,
                'won': self.won,
                'elapsed': round(self.elapsed(), 3),
                'steps': self.world.steps,
                'gravity': self.world.gravity,
                'bodies': [self.world.snapshot(e) for e in self.world.entities() if not e.is_static],
            }


class GameStore:
    """In-memory games keyed by id, expiring after a period of inactivity"""

    def __init__(self, lifetime_seconds: float = 30 * 60):
        self.lifetime_seconds = lifetime_seconds
        self.games: Dict[str, MazeGame] = {}
        self.lock = threading.Lock()

    @log_errors(logging.getLogger('maze_game.store'))
    def create(self, config: GameConfig, rng=None) -> MazeGame:
        self.purge_expired()
        game = MazeGame(config, rng=rng)
        with self.lock:
            self.games[game.id] = game

        maze_logger.log_game_event('game_created', {
            'game_id': game.id,
            'rows': config.rows,
            'cols': config.cols,
            'start': game.grid.start,
            'walls': len(game.maze.walls)
        })
        return game

    def get(self, game_id: str) -> MazeGame:
        with self.lock:
            game = self.games.get(game_id)
        if game is None:
            raise GameNotFoundError(f"No game with id {game_id!r}")
        return game

    def remove(self, game_id: str) -> MazeGame:
        with self.lock:
            game = self.games.pop(game_id, None)
        if game is None:
            raise GameNotFoundError(f"No game with id {game_id!r}")
        return game

    def purge_expired(self, now: Optional[float] = None) -> int:
        """Forget games idle for longer than the lifetime"""
        now = time.time() if now is None else now
        cutoff = now - self.lifetime_seconds
        with self.lock:
            expired = [gid for gid, game in self.games.items() if game.last_seen < cutoff]
            for gid in expired:
                del self.games[gid]
        if expired:
            logger.info(f"Purged {len(expired)} expired games")
        return len(expired)

    def won_count(self) -> int:
        with self.lock:
            return sum(1 for game in self.games.values() if game.won)

    def __len__(self):
        with self.lock:
            return len(self.games)

    def __contains__(self, game_id):
        with self.lock:
            return game_id in self.games
