import pytest

from symbolic_algebra import (
    parse, simplify, EngineConfig, LogLevel, configure_logging, set_log_level,
    get_config, set_config, reset_config
)
from symbolic_algebra import logging_system


def test_defaults():
    config = get_config()
    assert config.max_iterations == 64
    assert config.max_solve_depth == 256
    assert config.log_level == 'MINIMAL'
    assert not config.log_to_file


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("SYMBOLIC_ALGEBRA_MAX_ITERATIONS", "8")
    monkeypatch.setenv("SYMBOLIC_ALGEBRA_LOG_LEVEL", "verbose")
    monkeypatch.setenv("SYMBOLIC_ALGEBRA_LOG_FILE", "engine.log")
    reset_config()
    config = get_config()
    assert config.max_iterations == 8
    assert config.log_level == 'VERBOSE'
    assert config.log_to_file
    assert config.log_file_path == "engine.log"


@pytest.mark.parametrize("raw", ["0", "-3", "many"])
def test_invalid_environment_value(monkeypatch, raw):
    monkeypatch.setenv("SYMBOLIC_ALGEBRA_MAX_SOLVE_DEPTH", raw)
    reset_config()
    with pytest.raises(ValueError):
        get_config()


def test_config_is_cached_until_reset(monkeypatch):
    first = get_config()
    monkeypatch.setenv("SYMBOLIC_ALGEBRA_MAX_ITERATIONS", "5")
    assert get_config() is first
    reset_config()
    assert get_config().max_iterations == 5


def test_with_overrides():
    config = EngineConfig().with_overrides(max_iterations=3)
    assert config.max_iterations == 3
    assert config.max_solve_depth == EngineConfig().max_solve_depth
    set_config(config)
    assert get_config() is config


def test_unknown_log_level(monkeypatch):
    monkeypatch.setenv("SYMBOLIC_ALGEBRA_LOG_LEVEL", "LOUD")
    reset_config()
    with pytest.raises(ValueError):
        logging_system.get_logger()


def test_logger_follows_config():
    set_config(EngineConfig(log_level='DETAILED'))
    assert logging_system.get_logger().log_level is LogLevel.DETAILED


def test_solver_steps_are_logged(capsys):
    configure_logging(LogLevel.DETAILED)
    parse("2 * x + 1 = 7").solve_for('x')
    err = capsys.readouterr().err
    assert "STEP:" in err
    assert "solve" in err


def test_silent_logger_prints_nothing(capsys):
    configure_logging(LogLevel.SILENT)
    parse("2 * x + 1 = 7").solve_for('x')
    assert capsys.readouterr().err == ""


def test_iteration_guard_warns(capsys):
    configure_logging(LogLevel.MINIMAL)
    set_config(EngineConfig(max_iterations=1))
    simplify(parse("(x + 1) * 4 / 2"))
    assert "without reaching a fixed point" in capsys.readouterr().err


def test_set_log_level_changes_existing_logger():
    logger = configure_logging(LogLevel.SILENT)
    set_log_level(LogLevel.VERBOSE)
    assert logging_system.get_logger() is logger
    assert logger.log_level is LogLevel.VERBOSE


def test_file_logging(tmp_path):
    path = tmp_path / "engine.log"
    configure_logging(LogLevel.MODERATE, log_to_file=True, log_file_path=str(path))
    parse("x + 3 = 10").solve_for('x')
    assert "solve" in path.read_text()


def test_silent_logger_has_no_console_output_for_guard_hits(capsys):
    logger = configure_logging(LogLevel.SILENT)
    set_config(EngineConfig(max_iterations=1))
    simplify(parse("(x + 1) * 4 / 2"))
    assert logger.logger.handlers == []
    assert capsys.readouterr().err == ""
