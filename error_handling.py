#!/usr/bin/env python3
"""
Error types and Flask error handling for the Physics Maze Game
Game errors map onto JSON responses with structured logging
"""

import traceback
import datetime
import functools
import logging
from typing import Any, Callable, Dict, Optional
from flask import Flask, request
from werkzeug.exceptions import HTTPException


class MazeGameError(Exception):
    """Base class for all game errors"""
    status_code = 500
    error_name = 'Game error'

    def to_dict(self) -> Dict[str, Any]:
        return {'error': self.error_name, 'message': str(self)}


class InvalidMazeConfigError(MazeGameError, ValueError):
    """Grid dimensions, viewport or physics settings out of range"""
    status_code = 400
    error_name = 'Invalid configuration'


class InvalidInputError(MazeGameError, ValueError):
    """Unsupported key or malformed request body"""
    status_code = 400
    error_name = 'Invalid input'


class GameNotFoundError(MazeGameError, KeyError):
    """No game with the requested id (or it expired)"""
    status_code = 404
    error_name = 'Game not found'

    def __str__(self):
        # KeyError quotes its argument
        return Exception.__str__(self)


def log_errors(logger: Optional[logging.Logger] = None):
    """Decorator that logs any exception with call context before re-raising"""
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except Exception as e:
                error_logger = logger or logging.getLogger(func.__module__)
                error_logger.error(
                    f"Error in {func.__name__}: {type(e).__name__}: {e}",
                    extra={'context': {
                        'function': func.__name__,
                        'module': func.__module__,
                        'args_count': len(args),
                        'kwargs_keys': list(kwargs.keys()),
                        'timestamp': datetime.datetime.now().isoformat()
                    }}
                )
                raise
        return wrapper
    return decorator


class FlaskErrorHandler:
    """Flask error handler with structured logging"""

    def __init__(self, app: Flask, game_logger):
        self.app = app
        self.logger = game_logger
        self.setup_handlers()

    def _request_context(self) -> Dict[str, Any]:
        return {
            'request_method': request.method,
            'request_url': request.url,
            'user_agent': request.headers.get('User-Agent')
        }

    def setup_handlers(self):
        """Setup Flask error handlers"""

        @self.app.errorhandler(MazeGameError)
        def game_error(error):
            context = self._request_context()
            if error.status_code >= 500:
                context['traceback'] = traceback.format_exc()
            self.logger.log_error(error, context)
            return error.to_dict(), error.status_code

        @self.app.errorhandler(HTTPException)
        def http_error(error):
            self.logger.log_error(error, self._request_context())
            return {'error': error.name, 'message': error.description}, error.code

        @self.app.errorhandler(Exception)
        def handle_exception(error):
            """Catch-all exception handler"""
            context = self._request_context()
            context['traceback'] = traceback.format_exc()
            self.logger.log_error(error, context)

            # Don't expose internal errors in production
            if self.app.debug:
                return {'error': 'Internal error', 'message': str(error),
                        'traceback': context['traceback']}, 500
            return {'error': 'Internal server error', 'message': 'Something went wrong'}, 500


def setup_error_handling(app: Flask, game_logger) -> Flask:
    """Setup error handling for Flask app"""
    FlaskErrorHandler(app, game_logger)
    return app
