#!/usr/bin/env python3
"""
Physics Maze Game - Startup Validation
Ensures dependencies, port, log directory and configuration are usable before launch
"""

import sys
import socket
import importlib
import json
import datetime
import logging
from pathlib import Path
from typing import List

import psutil

from error_handling import InvalidMazeConfigError
from maze_config import GameConfig

REQUIRED_PACKAGES = ['flask', 'numpy', 'cv2', 'pymunk', 'psutil', 'matplotlib']


class SystemValidator:
    """Startup checks; collects errors and warnings instead of stopping at the first"""

    def __init__(self, config: GameConfig = None):
        self.config = config
        self.errors: List[str] = []
        self.warnings: List[str] = []
        self.success_count = 0
        self.total_checks = 0
        self.logger = logging.getLogger('maze_game.validation')

    def check_required_port(self, host: str, port: int) -> bool:
        """Verify the server port is free"""
        self.logger.info("🔍 Checking server port...")
        self.total_checks += 1
        try:
            with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
                sock.settimeout(1)
                if sock.connect_ex((host, port)) == 0:
                    self.errors.append(f"Port {port} is already in use")
                    self.logger.error(f"❌ Port {port} is occupied")
                    return False
        except OSError as e:
            self.errors.append(f"Error checking port {port}: {e}")
            self.logger.error(f"❌ Failed to check port {port}: {e}")
            return False

        self.success_count += 1
        self.logger.info(f"✅ Port {port} is available")
        return True

    def check_python_dependencies(self, packages: List[str] = None) -> bool:
        """Verify all required Python packages are importable"""
        self.logger.info("🐍 Checking Python dependencies...")
        ok = True
        for package in packages or REQUIRED_PACKAGES:
            self.total_checks += 1
            try:
                importlib.import_module(package)
                self.success_count += 1
                self.logger.info(f"✅ {package} imported successfully")
            except ImportError as e:
                ok = False
                self.errors.append(f"Missing package: {package} - {e}")
                self.logger.error(f"❌ Failed to import {package}: {e}")
        return ok

    def check_configuration(self) -> bool:
        """Verify the game configuration can build a maze"""
        self.logger.info("🧩 Checking game configuration...")
        self.total_checks += 1
        try:
            self.config = (self.config or GameConfig.from_env()).validate()
        except InvalidMazeConfigError as e:
            self.errors.append(f"Invalid configuration: {e}")
            self.logger.error(f"❌ Invalid configuration: {e}")
            return False

        self.success_count += 1
        self.logger.info(f"✅ Maze {self.config.rows}x{self.config.cols} "
                         f"in {self.config.width}x{self.config.height}px")
        return True

    def check_log_directory(self) -> bool:
        """Verify the log directory is writable"""
        self.total_checks += 1
        directory = Path(self.config.log_dir if self.config else 'logs')
        try:
            directory.mkdir(parents=True, exist_ok=True)
            test_file = directory / 'test_write.tmp'
            test_file.write_text('test')
            test_file.unlink()
        except OSError as e:
            self.errors.append(f"Cannot write to directory {directory}: {e}")
            self.logger.error(f"❌ Cannot write to {directory}: {e}")
            return False

        self.success_count += 1
        self.logger.info(f"✅ Directory {directory} is writable")
        return True

    def check_memory_requirements(self, minimum_gb: float = 0.25) -> bool:
        """Warn when little memory is available; each game holds a physics space"""
        self.total_checks += 1
        available_gb = psutil.virtual_memory().available / (1024**3)
        if available_gb < minimum_gb:
            self.warnings.append(f"Low memory: {available_gb:.2f}GB available (recommended: {minimum_gb}GB)")
            self.logger.warning(f"⚠️ Low memory: {available_gb:.2f}GB")
        else:
            self.logger.info(f"✅ Available memory: {available_gb:.2f}GB")
        self.success_count += 1
        return True

    def run_validation(self, check_port: bool = True) -> bool:
        """Execute all validation checks"""
        self.logger.info("🚀 Starting Physics Maze Game Validation")
        self.logger.info("=" * 60)

        checks_passed = True
        checks_passed &= self.check_python_dependencies()
        checks_passed &= self.check_configuration()
        checks_passed &= self.check_log_directory()
        if check_port and self.config is not None:
            checks_passed &= self.check_required_port(self.config.host, self.config.port)
        checks_passed &= self.check_memory_requirements()

        self.generate_validation_report()

        if not checks_passed or self.errors:
            self.logger.error("❌ VALIDATION FAILED - System not ready for launch")
            for error in self.errors:
                self.logger.error(f"   • {error}")
            return False

        self.logger.info("🎉 VALIDATION SUCCESSFUL - System ready for launch")
        for warning in self.warnings:
            self.logger.warning(f"   • {warning}")
        return True

    def report(self) -> dict:
        return {
            "timestamp": str(datetime.datetime.now()),
            "success_rate": self.success_count / self.total_checks * 100 if self.total_checks else 0,
            "passed_checks": self.success_count,
            "total_checks": self.total_checks,
            "errors": self.errors,
            "warnings": self.warnings,
            "system_ready": len(self.errors) == 0
        }

    def generate_validation_report(self) -> None:
        """Log a summary and save it next to the logs"""
        self.logger.info("=" * 60)
        self.logger.info("📊 VALIDATION REPORT")
        self.logger.info(f"✅ Passed: {self.success_count}/{self.total_checks}")
        self.logger.info(f"❌ Errors: {len(self.errors)}")
        self.logger.info(f"⚠️ Warnings: {len(self.warnings)}")

        log_dir = Path(self.config.log_dir if self.config else 'logs')
        try:
            with open(log_dir / 'validation_report.json', 'w') as f:
                json.dump(self.report(), f, indent=2)
        except OSError as e:
            self.logger.error(f"Failed to save validation report: {e}")


def main():
    """Main entry point for validation script"""
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
    validator = SystemValidator()
    sys.exit(0 if validator.run_validation() else 1)


if __name__ == "__main__":
    main()
