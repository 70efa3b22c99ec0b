#!/usr/bin/env python3
"""
Tests for the maze game HTTP API using Flask's test client
"""
import pytest

from game_session import GameStore
from maze_config import GameConfig
from maze_game_server import create_app


@pytest.fixture
def store():
    return GameStore()


@pytest.fixture
def client(store):
    app = create_app(GameConfig(rows=4, cols=4, width=400, height=400), store)
    app.config['TESTING'] = True
    return app.test_client()


def create_game(client, **body):
    response = client.post('/api/game', json=body)
    assert response.status_code == 201, response.get_json()
    return response.get_json()


def test_index_page(client):
    response = client.get('/')
    assert response.status_code == 200
    assert b'<canvas id="maze"' in response.data
    assert b'winner hidden' in response.data


def test_create_game(client, store):
    game = create_game(client)

    assert len(game['game_id']) == 12
    assert game['won'] is False
    assert game['config']['rows'] == 4
    assert game['maze_image'].startswith('data:image/png;base64,')

    walls = [e for e in game['entities'] if e['tag'] == 'wall']
    # 24 interior walls, 15 open
    assert len(walls) == 9
    assert len(store) == 1


def test_create_game_with_overrides(client):
    game = create_game(client, rows=6, cols=8, width=640, height=480, seed=3)
    assert game['config']['cols'] == 8
    assert game['config']['cell_width'] == 80
    assert game['config']['cell_height'] == 80

    same_seed = create_game(client, rows=6, cols=8, width=640, height=480, seed=3)
    walls = sorted((e['x'], e['y']) for e in game['entities'] if e['tag'] == 'wall')
    same_walls = sorted((e['x'], e['y']) for e in same_seed['entities'] if e['tag'] == 'wall')
    assert walls == same_walls


@pytest.mark.parametrize("body", [
    {'rows': 0},
    {'cols': -2},
    {'rows': 'ten'},
    {'rows': 1000},
    {'width': 0},
    {'rows': True},
])
def test_invalid_game_config(client, body):
    response = client.post('/api/game', json=body)
    assert response.status_code == 400
    assert response.get_json()['error'] == 'Invalid configuration'


def test_input_changes_velocity(client):
    game = create_game(client)
    response = client.post(f"/api/game/{game['game_id']}/input", json={'key': 'D'})
    assert response.status_code == 200
    assert response.get_json()['velocity'] == {'x': 300.0, 'y': 0.0}


@pytest.mark.parametrize("body", [{'key': 'Z'}, {}, {'key': None}])
def test_invalid_input(client, body):
    game = create_game(client)
    response = client.post(f"/api/game/{game['game_id']}/input", json=body)
    assert response.status_code == 400
    assert response.get_json()['error'] == 'Invalid input'


def test_state_returns_moving_bodies(client):
    game = create_game(client)
    response = client.get(f"/api/game/{game['game_id']}/state")
    assert response.status_code == 200

    state = response.get_json()
    assert state['won'] is False
    assert [b['tag'] for b in state['bodies']] == ['ball']


def test_win_visible_in_state(client, store):
    game = create_game(client)
    session = store.get(game['game_id'])
    session.handle_collision_start([(session.maze.ball, session.maze.goal)])

    state = client.get(f"/api/game/{game['game_id']}/state").get_json()
    assert state['won'] is True
    assert state['gravity'] == session.config.win_gravity
    assert len(state['bodies']) == 1 + len(session.maze.walls)


def test_unknown_game(client):
    for response in (
        client.get('/api/game/doesnotexist/state'),
        client.post('/api/game/doesnotexist/input', json={'key': 'W'}),
        client.get('/api/game/doesnotexist/maze.png'),
        client.delete('/api/game/doesnotexist'),
    ):
        assert response.status_code == 404
        assert response.get_json()['error'] == 'Game not found'


def test_maze_png(client):
    game = create_game(client)
    response = client.get(f"/api/game/{game['game_id']}/maze.png?cell_size=10")
    assert response.status_code == 200
    assert response.headers['Content-Type'] == 'image/png'
    assert response.data[:8] == b'\x89PNG\r\n\x1a\n'

    response = client.get(f"/api/game/{game['game_id']}/maze.png?cell_size=500")
    assert response.status_code == 400


def test_delete_game(client, store):
    game = create_game(client)
    response = client.delete(f"/api/game/{game['game_id']}")
    assert response.status_code == 200
    assert len(store) == 0


def test_unknown_route_is_json(client):
    response = client.get('/api/nothing-here')
    assert response.status_code == 404
    assert response.get_json()['error'] == 'Not Found'


def test_admin_endpoints(client):
    create_game(client)
    health = client.get('/admin/health').get_json()
    assert health['games']['active_games'] == 1
    assert health['memory']['status'] == 'healthy'

    metrics = client.get('/admin/metrics').get_json()
    assert metrics['maze_generation']['count'] >= 1
