"""
Engine configuration.

Values come from the environment so that a host application can tune the
engine without code changes:

    SYMBOLIC_ALGEBRA_MAX_ITERATIONS   fixed-point iterations per simplify call
    SYMBOLIC_ALGEBRA_MAX_SOLVE_DEPTH  nested isolation steps per solve call
    SYMBOLIC_ALGEBRA_LOG_LEVEL        SILENT, MINIMAL, MODERATE, DETAILED, VERBOSE
    SYMBOLIC_ALGEBRA_LOG_FILE         optional path; enables file logging
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Optional


_ENV_PREFIX = 'SYMBOLIC_ALGEBRA_'


@dataclass(frozen=True)
class EngineConfig:
    max_iterations: int = 64
    max_solve_depth: int = 256
    log_level: str = 'MINIMAL'
    log_to_file: bool = False
    log_file_path: Optional[str] = None

    def with_overrides(self, **kwargs) -> 'EngineConfig':
        return replace(self, **kwargs)


def _int_from_env(name: str, default: int) -> int:
    raw = os.environ.get(_ENV_PREFIX + name)
    if not raw:
        return default
    value = int(raw)
    if value <= 0:
        raise ValueError(f"{_ENV_PREFIX + name} must be a positive integer")
    return value


def load_config() -> EngineConfig:
    log_file = os.environ.get(_ENV_PREFIX + 'LOG_FILE') or None
    return EngineConfig(
        max_iterations=_int_from_env('MAX_ITERATIONS', EngineConfig.max_iterations),
        max_solve_depth=_int_from_env('MAX_SOLVE_DEPTH', EngineConfig.max_solve_depth),
        log_level=os.environ.get(_ENV_PREFIX + 'LOG_LEVEL', EngineConfig.log_level).upper(),
        log_to_file=log_file is not None,
        log_file_path=log_file,
    )


_config: Optional[EngineConfig] = None


def get_config() -> EngineConfig:
    global _config
    if _config is None:
        _config = load_config()
    return _config


def set_config(config: EngineConfig) -> None:
    global _config
    _config = config


def reset_config() -> None:
    """Drop the cached configuration so the next get_config() re-reads the environment"""
    global _config
    _config = None
