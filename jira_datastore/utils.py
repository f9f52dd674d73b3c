"""
Utility functions for the data store.

Includes logging setup, nested dictionary access, JSONL writing and
small formatting helpers.
"""

import json
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, Iterator, Mapping

import colorlog


def setup_logging(config) -> logging.Logger:
    """
    Set up logging with file and console handlers.

    Args:
        config: Configuration object

    Returns:
        Configured logger
    """
    # Create logs directory
    log_dir = Path(config.get('logging.log_dir', 'logs'))
    log_dir.mkdir(parents=True, exist_ok=True)

    # Generate log filename with timestamp
    timestamp = datetime.now().strftime('%Y%m%d')
    log_file = log_dir / f"datastore_{timestamp}.log"

    log_level = getattr(logging, str(config.get('logging.level', 'INFO')).upper())
    log_format = config.get(
        'logging.format',
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    formatter = logging.Formatter(log_format)

    file_handler = logging.FileHandler(log_file, encoding='utf-8')
    file_handler.setLevel(log_level)
    file_handler.setFormatter(formatter)

    console_handler = colorlog.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(colorlog.ColoredFormatter(
        '%(log_color)s%(levelname)-8s%(reset)s %(message)s',
        log_colors={
            'DEBUG': 'cyan',
            'INFO': 'green',
            'WARNING': 'yellow',
            'ERROR': 'red',
            'CRITICAL': 'red,bg_white',
        }
    ))

    logger = logging.getLogger('jira_datastore')
    logger.setLevel(log_level)
    logger.addHandler(file_handler)
    logger.addHandler(console_handler)

    # Suppress noisy libraries
    logging.getLogger('urllib3').setLevel(logging.WARNING)
    logging.getLogger('requests').setLevel(logging.WARNING)
    logging.getLogger('requests_oauthlib').setLevel(logging.WARNING)
    logging.getLogger('oauthlib').setLevel(logging.WARNING)

    logger.info(f"Logging initialized. Log file: {log_file}")
    return logger


def safe_get(data: Dict, *keys, default=None) -> Any:
    """
    Safely get nested dictionary value.

    Args:
        data: Dictionary to query
        *keys: Keys to traverse
        default: Default value if not found

    Returns:
        Value at nested key or default

    Example:
        >>> safe_get(issue, 'fields', 'comment', 'comments', default=[])
    """
    current = data
    for key in keys:
        if isinstance(current, dict):
            current = current.get(key)
            if current is None:
                return default
        else:
            return default
    return current if current is not None else default


def flatten_mapping(data: Mapping, prefix: str = '') -> Iterator:
    """
    Flatten nested mappings into dotted key/value pairs.

    Example:
        >>> dict(flatten_mapping({'oauth': {'secret': 'x'}}))
        {'oauth.secret': 'x'}
    """
    for key, value in data.items():
        name = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, Mapping):
            yield from flatten_mapping(value, name)
        else:
            yield name, value


def parse_bool(value: Any) -> bool:
    """Interpret a configuration string as a boolean flag."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in ('true', 'yes', '1', 'on')


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def write_jsonl(data: Dict, file_path: str, append: bool = True) -> None:
    """
    Write data to JSONL file.

    Datetime values are written as ISO 8601 strings.

    Args:
        data: Dictionary to write
        file_path: Output file path
        append: Whether to append or overwrite
    """
    mode = 'a' if append else 'w'

    with open(file_path, mode, encoding='utf-8') as f:
        json.dump(data, f, ensure_ascii=False, default=_json_default)
        f.write('\n')


def read_jsonl(file_path: str) -> list:
    """
    Read JSONL file.

    Args:
        file_path: Input file path

    Returns:
        List of dictionaries
    """
    data = []

    with open(file_path, 'r', encoding='utf-8') as f:
        for line in f:
            line = line.strip()
            if line:
                data.append(json.loads(line))

    return data


def calculate_file_size(file_path: str) -> str:
    """
    Calculate human-readable file size.

    Args:
        file_path: Path to file

    Returns:
        Formatted file size string
    """
    try:
        size = Path(file_path).stat().st_size
    except OSError:
        return "Unknown"

    for unit in ['B', 'KB', 'MB', 'GB']:
        if size < 1024.0:
            return f"{size:.2f} {unit}"
        size /= 1024.0

    return f"{size:.2f} TB"
