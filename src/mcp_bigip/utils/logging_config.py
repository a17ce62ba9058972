"""Logging configuration for the ltmcraft MCP server.

Application records from the ``mcp_bigip`` package go to stderr at the
configured level and to a rotating file at DEBUG. Timings of lifecycle
operations and tool calls go to a separate ``ltmcraft.perf`` logger with its
own file, so they can be followed without the application noise.

Environment Variables:
    LTMCRAFT_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (default: INFO)
    LTMCRAFT_LOG_FILE: Path to log file (default: ~/.ltmcraft/ltmcraft.log)
    LTMCRAFT_LOG_MAX_SIZE: Max log file size in MB (default: 10)
    LTMCRAFT_LOG_BACKUPS: Number of backup files to keep (default: 5)

Usage:
    setup_logging()  # once, from main()

    @timed("read")
    async def read(self, client, state):
        ...

    async with timed_section("tool:resource_read", target="bigip-a", type="bigip_ltm_pool"):
        ...
"""
import asyncio
import functools
import logging
import os
import time
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Callable, Optional

perf_logger = logging.getLogger("ltmcraft.perf")

_configured = False

_DATEFMT = "%Y-%m-%d %H:%M:%S"
APP_FORMAT = "%(asctime)s.%(msecs)03d | %(name)-28s | %(levelname)-7s | %(message)s"
PERF_FORMAT = "%(asctime)s.%(msecs)03d | PERF | %(message)s"


def get_log_level() -> int:
    """Get log level from environment."""
    name = os.environ.get("LTMCRAFT_LOG_LEVEL", "INFO").upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def get_log_file() -> Path:
    return Path(os.environ.get(
        "LTMCRAFT_LOG_FILE", str(Path.home() / ".ltmcraft" / "ltmcraft.log")
    ))


def _rotating_handler(path: Path, fmt: str) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        path,
        maxBytes=int(os.environ.get("LTMCRAFT_LOG_MAX_SIZE", "10")) * 1024 * 1024,
        backupCount=int(os.environ.get("LTMCRAFT_LOG_BACKUPS", "5")),
        encoding="utf-8",
    )
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(fmt, datefmt=_DATEFMT))
    return handler


def setup_logging() -> None:
    """Attach console, file and perf handlers. Later calls are no-ops."""
    global _configured
    if _configured:
        return

    level = get_log_level()
    log_file = get_log_file()
    log_file.parent.mkdir(parents=True, exist_ok=True)

    # stdout carries the MCP protocol, so the console handler writes to stderr
    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(logging.Formatter(APP_FORMAT, datefmt=_DATEFMT))

    package_logger = logging.getLogger("mcp_bigip")
    package_logger.setLevel(logging.DEBUG)
    package_logger.addHandler(console)
    package_logger.addHandler(_rotating_handler(log_file, APP_FORMAT))

    perf_logger.setLevel(logging.DEBUG)
    perf_logger.addHandler(_rotating_handler(log_file.with_name("ltmcraft-perf.log"), PERF_FORMAT))
    perf_logger.propagate = False

    _configured = True
    package_logger.info(f"Logging initialized: level={logging.getLevelName(level)}, file={log_file}")


def _report(
    operation: str,
    target: Optional[str],
    started: float,
    error: Optional[BaseException] = None,
    extra: Optional[dict] = None,
) -> None:
    elapsed = (time.perf_counter() - started) * 1000
    outcome = f"FAIL: {error}" if error is not None else "OK"
    line = f"{operation:24s} | {target or 'N/A':32s} | {elapsed:8.2f}ms | {outcome}"
    if extra:
        line += " | " + " | ".join(f"{k}={v}" for k, v in extra.items())
    if error is not None:
        perf_logger.warning(line)
    else:
        perf_logger.info(line)


def timed(operation: str):
    """Log the duration of a handler method to the perf logger.

    The target column is the ``type_name`` of the instance the method is
    bound to, when it has one.
    """
    def decorator(func: Callable) -> Callable:
        if asyncio.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_wrapper(*args, **kwargs) -> Any:
                target = getattr(args[0], "type_name", None) if args else None
                started = time.perf_counter()
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    _report(operation, target, started, e)
                    raise
                _report(operation, target, started)
                return result
            return async_wrapper

        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs) -> Any:
            target = getattr(args[0], "type_name", None) if args else None
            started = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                _report(operation, target, started, e)
                raise
            _report(operation, target, started)
            return result
        return sync_wrapper

    return decorator


@asynccontextmanager
async def timed_section(operation: str, target: Optional[str] = None, **extra):
    """Time an async block; keyword arguments are appended as ``key=value``."""
    started = time.perf_counter()
    try:
        yield
    except Exception as e:
        _report(operation, target, started, e, extra)
        raise
    _report(operation, target, started, extra=extra)
