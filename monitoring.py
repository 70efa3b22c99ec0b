#!/usr/bin/env python3
"""
Monitoring and Logging for the Physics Maze Game
"""

import logging
import logging.handlers
import os
import json
import time
import threading
from datetime import datetime, timedelta, timezone
from functools import wraps

import psutil
from flask import g, jsonify, request


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


class MazeGameLogger:
    def __init__(self, log_dir='logs', log_level='INFO'):
        self.log_dir = log_dir
        self.log_level = log_level
        self.setup_logging()

    def setup_logging(self):
        """Setup rotating file and console handlers"""
        os.makedirs(self.log_dir, exist_ok=True)

        # Main logger; module loggers ('maze_game.*') propagate here
        self.logger = logging.getLogger('maze_game')
        self.logger.setLevel(getattr(logging, self.log_level.upper(), logging.INFO))
        self.logger.handlers.clear()

        access_handler = logging.handlers.RotatingFileHandler(
            os.path.join(self.log_dir, 'access.log'),
            maxBytes=10*1024*1024,  # 10MB
            backupCount=5
        )
        access_handler.setLevel(logging.INFO)

        error_handler = logging.handlers.RotatingFileHandler(
            os.path.join(self.log_dir, 'error.log'),
            maxBytes=5*1024*1024,   # 5MB
            backupCount=5
        )
        error_handler.setLevel(logging.ERROR)

        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.INFO)

        detailed_formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )
        access_formatter = logging.Formatter(
            '%(asctime)s - %(message)s'
        )

        access_handler.setFormatter(access_formatter)
        error_handler.setFormatter(detailed_formatter)
        console_handler.setFormatter(detailed_formatter)

        self.logger.addHandler(access_handler)
        self.logger.addHandler(error_handler)
        self.logger.addHandler(console_handler)

        # Game events (creation, wins) get their own file
        game_handler = logging.handlers.RotatingFileHandler(
            os.path.join(self.log_dir, 'game.log'),
            maxBytes=5*1024*1024,   # 5MB
            backupCount=5
        )
        game_handler.setFormatter(detailed_formatter)
        self.game_logger = logging.getLogger('maze_game.events')
        self.game_logger.handlers.clear()
        self.game_logger.addHandler(game_handler)
        self.game_logger.setLevel(logging.INFO)

    def log_request(self, endpoint, method, status_code, response_time, ip=None, user_agent=None):
        """Log HTTP request"""
        log_data = {
            'timestamp': _utcnow(),
            'method': method,
            'endpoint': endpoint,
            'status_code': status_code,
            'response_time_ms': round(response_time * 1000, 2),
            'ip': ip or 'unknown',
            'user_agent': user_agent or 'unknown'
        }

        self.logger.info(f"ACCESS: {json.dumps(log_data)}")

    def log_game_event(self, event_type, data):
        """Log game lifecycle events"""
        log_data = {
            'timestamp': _utcnow(),
            'event_type': event_type,
            'data': data
        }

        self.game_logger.info(f"GAME: {json.dumps(log_data, default=str)}")

    def log_error(self, error, context=None):
        """Log errors with context"""
        log_data = {
            'timestamp': _utcnow(),
            'error': str(error),
            'type': type(error).__name__,
            'context': context or {}
        }

        self.logger.error(f"ERROR: {json.dumps(log_data, default=str)}")

    def log_performance(self, operation, duration, details=None):
        """Log performance metrics"""
        log_data = {
            'timestamp': _utcnow(),
            'operation': operation,
            'duration_ms': round(duration * 1000, 2),
            'details': details or {}
        }

        self.logger.info(f"PERFORMANCE: {json.dumps(log_data)}")


class PerformanceMonitor:
    def __init__(self, logger, slow_threshold=1.0):
        self.logger = logger
        self.slow_threshold = slow_threshold
        self.metrics = {}
        self.lock = threading.Lock()

    def time_operation(self, operation_name):
        """Decorator to time operations"""
        def decorator(func):
            @wraps(func)
            def wrapper(*args, **kwargs):
                start_time = time.perf_counter()
                success = True
                error = None
                try:
                    return func(*args, **kwargs)
                except Exception as e:
                    success = False
                    error = str(e)
                    raise
                finally:
                    duration = time.perf_counter() - start_time
                    self.record_metric(operation_name, duration, success, error)
            return wrapper
        return decorator

    def record_metric(self, operation, duration, success=True, error=None):
        """Record performance metric"""
        with self.lock:
            if operation not in self.metrics:
                self.metrics[operation] = {
                    'count': 0,
                    'total_duration': 0,
                    'success_count': 0,
                    'error_count': 0,
                    'min_duration': float('inf'),
                    'max_duration': 0,
                    'errors': []
                }

            metric = self.metrics[operation]
            metric['count'] += 1
            metric['total_duration'] += duration
            metric['min_duration'] = min(metric['min_duration'], duration)
            metric['max_duration'] = max(metric['max_duration'], duration)

            if success:
                metric['success_count'] += 1
            else:
                metric['error_count'] += 1
                if error and len(metric['errors']) < 10:
                    metric['errors'].append(error)

        if duration > self.slow_threshold:
            self.logger.log_performance(operation, duration, {
                'success': success,
                'avg_duration': metric['total_duration'] / metric['count']
            })

    def get_metrics(self):
        """Get all performance metrics"""
        with self.lock:
            result = {}
            for operation, metric in self.metrics.items():
                if metric['count'] > 0:
                    result[operation] = {
                        'count': metric['count'],
                        'avg_duration_ms': round(metric['total_duration'] / metric['count'] * 1000, 2),
                        'min_duration_ms': round(metric['min_duration'] * 1000, 2),
                        'max_duration_ms': round(metric['max_duration'] * 1000, 2),
                        'success_rate': round(metric['success_count'] / metric['count'] * 100, 2),
                        'error_count': metric['error_count'],
                        'recent_errors': metric['errors'][-5:]
                    }
            return result


class HealthMonitor:
    def __init__(self, logger, game_store):
        self.logger = logger
        self.game_store = game_store
        self.start_time = time.time()

    def check_game_store(self):
        """Active games and expired ones awaiting purge"""
        try:
            return {
                'status': 'healthy',
                'active_games': len(self.game_store),
                'won_games': self.game_store.won_count()
            }
        except Exception as e:
            self.logger.log_error(e, {'operation': 'check_game_store'})
            return {'status': 'unhealthy', 'error': str(e)}

    def check_memory_usage(self):
        """Check memory usage"""
        try:
            process = psutil.Process()
            memory_info = process.memory_info()

            return {
                'status': 'healthy',
                'rss_mb': round(memory_info.rss / 1024 / 1024, 2),
                'vms_mb': round(memory_info.vms / 1024 / 1024, 2),
                'cpu_percent': process.cpu_percent()
            }
        except psutil.Error as e:
            return {'status': 'unhealthy', 'error': str(e)}

    def get_system_health(self):
        """Get overall system health"""
        uptime = time.time() - self.start_time

        health = {
            'timestamp': _utcnow(),
            'uptime_seconds': round(uptime, 2),
            'uptime_formatted': str(timedelta(seconds=int(uptime))),
            'games': self.check_game_store(),
            'memory': self.check_memory_usage(),
            'overall_status': 'healthy'
        }

        for component in ['games', 'memory']:
            if health[component].get('status') == 'unhealthy':
                health['overall_status'] = 'unhealthy'
                break

        return health


# Global instances
maze_logger = MazeGameLogger(
    log_dir=os.environ.get('MAZE_LOG_DIR', 'logs'),
    log_level=os.environ.get('MAZE_LOG_LEVEL', 'INFO')
)
performance_monitor = PerformanceMonitor(maze_logger)


def setup_monitoring(app, game_store, quiet_endpoints=()):
    """Setup request timing and admin endpoints for Flask app

    Requests to quiet_endpoints (the state poll) are not access-logged.
    """
    health_monitor = HealthMonitor(maze_logger, game_store)

    @app.before_request
    def before_request():
        g.start_time = time.time()

    @app.after_request
    def after_request(response):
        if hasattr(g, 'start_time') and request.endpoint not in quiet_endpoints:
            response_time = time.time() - g.start_time
            maze_logger.log_request(
                request.endpoint,
                request.method,
                response.status_code,
                response_time,
                request.environ.get('HTTP_X_FORWARDED_FOR', request.remote_addr),
                request.headers.get('User-Agent')
            )
        return response

    @app.route('/admin/health')
    def health_check():
        """System health check endpoint"""
        return jsonify(health_monitor.get_system_health())

    @app.route('/admin/metrics')
    def get_metrics():
        """Performance metrics endpoint"""
        return jsonify(performance_monitor.get_metrics())

    return health_monitor


# Monitoring decorators
def monitor_maze_generation(func):
    """Monitor maze generation performance"""
    return performance_monitor.time_operation('maze_generation')(func)


def monitor_materialization(func):
    """Monitor collider creation performance"""
    return performance_monitor.time_operation('materialization')(func)


def monitor_simulation(func):
    """Monitor physics stepping performance"""
    return performance_monitor.time_operation('simulation_step')(func)
