# utils.py
"""
Configuration and logging helpers for the tunneling visualization.

This module sets up logging, loads `config.json` and validates its
`run_control` section (frame period, step limit, log throttle, profiling)
before the frame loop starts.
"""
import logging
import logging.handlers
import json
import os
from typing import Dict, Any, NamedTuple

from constants import TICK_MS

# --- Data Contracts ---
#
# setup_logging(config: Dict[str, Any]) -> None:
#   - Inputs:
#     - config: A dictionary with an optional "logging" key holding
#       "level", "format" and "log_file" sub-keys.
#   - Outputs: None
#   - Side Effects: Configures the root Python logger. Creates the log
#     directory if it doesn't exist. Sets up a console handler and a
#     rotating file handler.
#
# load_config(path: str) -> Dict[str, Any]:
#   - Outputs: the parsed JSON object.
#   - Raises: FileNotFoundError, json.JSONDecodeError (logged, then re-raised).
#
# load_run_control(config: Dict[str, Any]) -> RunControl:
#   - Inputs: the full config; reads the optional "run_control" section.
#   - Raises: ValueError if tick_ms or log_throttle_steps is not a positive
#     number, or max_steps is negative.

DEFAULT_LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'
DEFAULT_LOG_FILE = 'logs/simulation.log'


def setup_logging(config: Dict[str, Any]) -> None:
    """
    Configures the logging system from a configuration dictionary.

    Sets up logging to both the console and a rotating file.
    """
    log_config = config.get('logging', {})
    log_level = log_config.get('level', 'INFO').upper()
    log_format = log_config.get('format', DEFAULT_LOG_FORMAT)
    log_file_path = log_config.get('log_file', DEFAULT_LOG_FILE)

    log_dir = os.path.dirname(log_file_path)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    logger = logging.getLogger()
    logger.setLevel(log_level)

    # Clear existing handlers to avoid duplication
    if logger.hasHandlers():
        for handler in list(logger.handlers):
            handler.close()
        logger.handlers.clear()

    formatter = logging.Formatter(log_format)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # Rotates when the log reaches 1MB, keeps 5 backup logs.
    file_handler = logging.handlers.RotatingFileHandler(
        log_file_path, maxBytes=1024*1024, backupCount=5
    )
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    logging.info("Logging system initialized.")
    logging.debug(f"Log level set to {log_level}.")
    logging.debug(f"Log file path: {log_file_path}")


def load_config(path: str) -> Dict[str, Any]:
    """Loads a JSON configuration file."""
    logging.info(f"Loading configuration from {path}...")
    try:
        with open(path, 'r') as f:
            config = json.load(f)
        logging.info("Configuration loaded successfully.")
        return config
    except FileNotFoundError:
        logging.error(f"Configuration file not found at {path}.")
        raise
    except json.JSONDecodeError:
        logging.error(f"Error decoding JSON from {path}.")
        raise


class RunControl(NamedTuple):
    """Frame-loop settings from the `run_control` config section."""
    tick_ms: float
    max_steps: int
    log_throttle_steps: int
    profile: bool

    @property
    def fps(self) -> float:
        return 1000.0 / self.tick_ms


def load_run_control(config: Dict[str, Any]) -> RunControl:
    """Reads and validates the frame-loop settings, applying defaults."""
    run_params = config.get('run_control', {})
    tick_ms = run_params.get('tick_ms', TICK_MS)
    log_throttle = run_params.get('log_throttle_steps', 100)
    max_steps = run_params.get('max_steps', 0) or 0

    if isinstance(tick_ms, bool) or not isinstance(tick_ms, (int, float)) or tick_ms <= 0:
        raise ValueError(f"run_control.tick_ms must be a positive number, got {tick_ms!r}.")
    if isinstance(log_throttle, bool) or not isinstance(log_throttle, int) or log_throttle <= 0:
        raise ValueError(f"run_control.log_throttle_steps must be a positive integer, got {log_throttle!r}.")
    if isinstance(max_steps, bool) or not isinstance(max_steps, int) or max_steps < 0:
        raise ValueError(f"run_control.max_steps must be a non-negative integer, got {max_steps!r}.")

    run_control = RunControl(tick_ms, max_steps, log_throttle, bool(run_params.get('profile', False)))
    logging.debug(f"Run control: {run_control}")
    return run_control
