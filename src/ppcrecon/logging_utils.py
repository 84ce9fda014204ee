"""Logging setup and timing helpers for the ppcrecon command line.

Library modules only create module-level loggers under ``ppcrecon.*``;
handlers are attached here, once, by the entry point.
  - console output in the system format
  - a log file under ``logging.logs_dir`` (console-only if it cannot be opened)
"""
from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Dict


SYSTEM_FMT = "[%(asctime)s] [%(levelname)s] %(name)s: %(message)s"


def _logging_section(config: dict) -> dict:
    return (config or {}).get("logging", {}) or {}


def _ensure_logs_dir(config: dict) -> Path:
    logs_dir = Path(_logging_section(config).get("logs_dir", "logs")).expanduser().resolve()
    logs_dir.mkdir(parents=True, exist_ok=True)
    return logs_dir


def _safe_add_file_handler(logger: logging.Logger, path: Path, fmt: str, level: int) -> None:
    try:
        fh = logging.FileHandler(path, encoding="utf-8")
        fh.setLevel(level)
        fh.setFormatter(logging.Formatter(fmt))
        logger.addHandler(fh)
    except OSError as exc:
        logger.warning("[WARNING] Failed to attach file handler %s (%s)", str(path), exc)


def get_logger(name: str, config: dict) -> logging.Logger:
    """Return a logger with console + file handlers.

    - File: ``logging.file_name`` under ``logging.logs_dir``
    - Level: ``logging.level`` (INFO by default)
    """
    section = _logging_section(config)
    level = getattr(logging, str(section.get("level", "INFO")).upper(), logging.INFO)
    logger = logging.getLogger(name)
    logger.setLevel(level)
    # Reset handlers to avoid duplication across repeated initializations
    logger.handlers = []

    sh = logging.StreamHandler()
    sh.setLevel(level)
    sh.setFormatter(logging.Formatter(SYSTEM_FMT))
    logger.addHandler(sh)

    try:
        logs_dir = _ensure_logs_dir(config)
    except OSError as exc:
        logger.warning("[WARNING] Logs directory unavailable (%s); console only", exc)
        return logger
    _safe_add_file_handler(logger, logs_dir / section.get("file_name", "ppcrecon.log"), SYSTEM_FMT, level)
    return logger


def start_phase_timer(phase_name: str) -> float:
    """Start a timer for a given step and return the perf counter."""
    return time.perf_counter()


def end_phase_timer(phase_name: str, start_time: float, timing_dict: Dict[str, float], logger: logging.Logger) -> float:
    """End timer, record to ``timing_dict`` and log the duration."""
    elapsed = time.perf_counter() - float(start_time)
    timing_dict[phase_name] = float(elapsed)
    logger.info("Step %s completed in %.2f seconds", phase_name, elapsed)
    return elapsed


def log_system_event(logger: logging.Logger, message: str):
    logger.info("[SYSTEM] %s", message)


def log_warning(logger: logging.Logger, message: str):
    logger.warning("[WARNING] %s", message)


def log_error(logger: logging.Logger, message: str):
    logger.error("[ERROR] %s", message)
