#!/usr/bin/env python3
"""
Physics Maze Game server
Serves the browser game and a JSON API over in-memory game sessions
"""

import logging

from flask import Flask, jsonify, make_response, render_template, request

from error_handling import InvalidInputError, InvalidMazeConfigError, setup_error_handling
from game_session import GameStore
from maze_config import GameConfig
from maze_image import encode_png, encode_png_data_url, render_maze_image
from monitoring import maze_logger, setup_monitoring

logger = logging.getLogger('maze_game.server')

MAX_CELLS_PER_SIDE = 100
OVERRIDABLE_FIELDS = ('rows', 'cols', 'width', 'height', 'seed')


def _read_overrides(data):
    """Integer overrides for a new game from the request body"""
    if not isinstance(data, dict):
        raise InvalidInputError("Request body must be a JSON object")

    overrides = {}
    for name in OVERRIDABLE_FIELDS:
        value = data.get(name)
        if value is None:
            continue
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidMazeConfigError(f"{name} must be an integer, got {value!r}")
        overrides[name] = value

    for name in ('rows', 'cols'):
        if overrides.get(name, 0) > MAX_CELLS_PER_SIDE:
            raise InvalidMazeConfigError(f"{name} must be at most {MAX_CELLS_PER_SIDE}")
    return overrides


def create_app(config=None, store=None):
    """Build the Flask app around a config and a game store"""
    config = (config or GameConfig.from_env()).validate()
    store = store if store is not None else GameStore(config.session_lifetime.total_seconds())

    app = Flask(__name__)
    app.config['GAME_CONFIG'] = config
    app.config['GAME_STORE'] = store
    app.config['HOST'] = config.host
    app.config['PORT'] = config.port

    @app.route('/')
    def index():
        return render_template('maze_game.html', config=config.public_view())

    @app.route('/api/game', methods=['POST'])
    def create_game():
        overrides = _read_overrides(request.get_json(silent=True) or {})
        game_config = config.with_overrides(**overrides)
        game = store.create(game_config)

        payload = game.describe()
        payload['maze_image'] = encode_png_data_url(render_maze_image(game.grid))
        return jsonify(payload), 201

    @app.route('/api/game/<game_id>/input', methods=['POST'])
    def game_input(game_id):
        game = store.get(game_id)
        data = request.get_json(silent=True) or {}
        if not isinstance(data, dict) or 'key' not in data:
            raise InvalidInputError("Missing key")

        vx, vy = game.handle_key(data['key'])
        return jsonify({'game_id': game.id, 'velocity': {'x': vx, 'y': vy}})

    @app.route('/api/game/<game_id>/state', methods=['GET'])
    def game_state(game_id):
        game = store.get(game_id)
        game.advance()
        return jsonify(game.state())

    @app.route('/api/game/<game_id>', methods=['DELETE'])
    def delete_game(game_id):
        game = store.remove(game_id)
        maze_logger.log_game_event('game_deleted', {'game_id': game.id, 'won': game.won})
        return jsonify({'game_id': game.id, 'deleted': True})

    @app.route('/api/game/<game_id>/maze.png', methods=['GET'])
    def maze_png(game_id):
        game = store.get(game_id)
        cell_size = request.args.get('cell_size', 20, type=int)
        if not 4 <= cell_size <= 64:
            raise InvalidInputError("cell_size must be between 4 and 64")

        response = make_response(encode_png(render_maze_image(game.grid, cell_size=cell_size)))
        response.headers['Content-Type'] = 'image/png'
        response.headers['Cache-Control'] = 'no-store, no-cache, must-revalidate, max-age=0'
        return response

    setup_error_handling(app, maze_logger)
    setup_monitoring(app, store, quiet_endpoints={'game_state'})
    return app


def main():
    from startup_validation import SystemValidator

    config = GameConfig.from_env()
    validator = SystemValidator(config)
    if not validator.run_validation():
        raise SystemExit(1)

    app = create_app(config)
    print("🚀 Starting Physics Maze Game")
    print(f"🧩 Maze size: {config.rows}x{config.cols}")
    print(f"🌐 Available at: http://{config.host}:{config.port}")
    app.run(host=config.host, port=config.port, debug=False)


if __name__ == '__main__':
    main()
