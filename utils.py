"""
Utility functions for the trade journal: configuration and logging.
"""

import copy
import logging
import logging.handlers
import os
import re
from pathlib import Path
from typing import Dict

import colorlog
import yaml

from analytics.periods import Frequency
from shared.constants import (
    DEFAULT_CAPITAL,
    DEFAULT_DD_THRESHOLD,
    DEFAULT_MAX_LOSS_STREAK,
    LOGS_DIR,
    STREAK_GAP_DAYS,
)
from shared.types import AppConfig

DEFAULT_CONFIG: AppConfig = {
    'journal': {
        'frequency': 'daily',
        'language': 'en',
        'time_range': 'ALL',
        'default_capital': DEFAULT_CAPITAL,
    },
    'risk': {
        'dd_threshold': DEFAULT_DD_THRESHOLD,
        'max_loss_streak': DEFAULT_MAX_LOSS_STREAK,
        'streak_gap_days': STREAK_GAP_DAYS,
    },
    'logging': {
        'level': 'INFO',
        'file': os.path.join(LOGS_DIR, 'journal.log'),
        'console': True,
    },
}

_ENV_REF = re.compile(r'\$\{(\w+)\}')


def _resolve_env_vars(obj):
    """Recursively replace ${ENV_VAR} references; unknown vars are left as-is."""
    if isinstance(obj, str):
        return _ENV_REF.sub(lambda m: os.environ.get(m.group(1), m.group(0)), obj)
    if isinstance(obj, dict):
        return {k: _resolve_env_vars(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_resolve_env_vars(i) for i in obj]
    return obj


def _merge(base: Dict, override: Dict) -> Dict:
    merged = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(config_file: str = 'config.yaml') -> AppConfig:
    """
    Load configuration from YAML file on top of ``DEFAULT_CONFIG``.
    Supports ${ENV_VAR} substitution in string values.

    Args:
        config_file: Path to config file

    Returns:
        Configuration dictionary
    """
    from dotenv import load_dotenv
    load_dotenv()

    config_path = Path(config_file)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_file}")

    with open(config_path, 'r') as f:
        loaded = yaml.safe_load(f) or {}

    return _merge(DEFAULT_CONFIG, _resolve_env_vars(loaded))


def setup_logging(config: AppConfig):
    """
    Setup logging configuration.

    Args:
        config: Configuration dictionary
    """
    log_config = config.get('logging') or DEFAULT_CONFIG['logging']

    handlers = []

    log_file = log_config.get('file')
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_path,
            maxBytes=10*1024*1024,  # 10 MB
            backupCount=5
        )
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        handlers.append(file_handler)

    if log_config.get('console', True):
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(colorlog.ColoredFormatter(
            '%(log_color)s%(asctime)s - %(name)s - %(levelname)s - %(message)s%(reset)s',
            datefmt='%H:%M:%S',
            log_colors={
                'DEBUG': 'cyan',
                'INFO': 'green',
                'WARNING': 'yellow',
                'ERROR': 'red',
                'CRITICAL': 'red,bg_white',
            }
        ))
        handlers.append(console_handler)

    logging.basicConfig(
        level=getattr(logging, str(log_config.get('level', 'INFO')).upper(), logging.INFO),
        handlers=handlers,
        force=True,
    )


def validate_config(config: AppConfig) -> None:
    """
    Validate configuration.  Raises ``ValueError`` on invalid input.

    Args:
        config: Configuration dictionary
    """
    for section in ('journal', 'risk', 'logging'):
        if section not in config:
            raise ValueError(f"Missing required config section: {section}")

    journal = config['journal']
    frequency = journal.get('frequency', 'daily')
    if frequency not in {f.value for f in Frequency}:
        raise ValueError(f"Unknown frequency: {frequency}")

    if journal.get('language', 'en') not in ('en', 'zh'):
        raise ValueError("language must be 'en' or 'zh'")

    if journal.get('time_range', 'ALL') not in ('ALL', '1M', '3M', 'YTD', 'CUSTOM'):
        raise ValueError(f"Unknown time_range: {journal.get('time_range')}")

    if journal.get('default_capital', DEFAULT_CAPITAL) <= 0:
        raise ValueError("default_capital must be positive")

    risk = config['risk']
    dd_threshold = risk.get('dd_threshold', DEFAULT_DD_THRESHOLD)
    if not 5 <= dd_threshold <= 50:
        raise ValueError("dd_threshold must be between 5 and 50")

    if risk.get('max_loss_streak', DEFAULT_MAX_LOSS_STREAK) < 1:
        raise ValueError("max_loss_streak must be at least 1")

    if risk.get('streak_gap_days', STREAK_GAP_DAYS) < 1:
        raise ValueError("streak_gap_days must be at least 1")
