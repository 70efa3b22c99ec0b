#!/usr/bin/env python3
"""
Live check against a running maze game server
Usage: python check_live_server.py [base_url]
"""
import sys
import time

import requests

DEFAULT_URL = "http://127.0.0.1:8080"


def check_server(base_url=DEFAULT_URL, timeout=5):
    """Create a small game, push the ball, poll state and fetch the maze image"""
    print("=== LIVE SERVER CHECK ===")
    try:
        response = requests.post(f"{base_url}/api/game", json={'rows': 5, 'cols': 5}, timeout=timeout)
        response.raise_for_status()
        game = response.json()
        game_id = game['game_id']
        print(f"Game ID: {game_id}")
        print(f"Entities: {len(game['entities'])}")

        walls = [e for e in game['entities'] if e['tag'] == 'wall']
        # 5x5 has 40 interior walls, 24 of them open
        assert len(walls) == 16, f"Expected 16 walls, got {len(walls)}"

        response = requests.post(f"{base_url}/api/game/{game_id}/input", json={'key': 'D'}, timeout=timeout)
        response.raise_for_status()
        velocity = response.json()['velocity']
        print(f"Velocity after D: {velocity}")
        assert velocity['x'] > 0, "Ball did not accelerate to the right"

        time.sleep(0.2)
        response = requests.get(f"{base_url}/api/game/{game_id}/state", timeout=timeout)
        response.raise_for_status()
        state = response.json()
        ball = next(b for b in state['bodies'] if b['tag'] == 'ball')
        print(f"Ball after 0.2s: ({ball['x']}, {ball['y']}), steps={state['steps']}")

        response = requests.get(f"{base_url}/api/game/{game_id}/maze.png", timeout=timeout)
        response.raise_for_status()
        assert response.headers['Content-Type'] == 'image/png'
        assert response.content[:8] == b'\x89PNG\r\n\x1a\n', "Not a PNG"

        requests.delete(f"{base_url}/api/game/{game_id}", timeout=timeout).raise_for_status()

        print("✅ LIVE SERVER: SUCCESS")
        return True

    except requests.exceptions.ConnectionError:
        print("❌ LIVE SERVER: FAILED - Server not running")
        return False
    except (requests.exceptions.RequestException, AssertionError, KeyError, StopIteration) as e:
        print(f"❌ LIVE SERVER: FAILED - {e}")
        return False


if __name__ == "__main__":
    url = sys.argv[1] if len(sys.argv) > 1 else DEFAULT_URL
    sys.exit(0 if check_server(url) else 1)
