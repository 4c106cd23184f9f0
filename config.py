"""
Configuration module for issue2file
Contains the configurable constants, environment helpers and the resolution of
settings from the TOML config file, command-line flags and the environment.
"""

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from errors import ConfigError


# ============================================================================
# GITHUB API SETTINGS
# ============================================================================

GITHUB_API_URL: str = "https://api.github.com"

# Maximum page size accepted by the REST API
ISSUES_PER_PAGE: int = 100


# ============================================================================
# AI INTEGRATION SETTINGS
# ============================================================================

# Default chat-completion model
DEFAULT_AI_MODEL: str = 'gpt-4o-mini'

# None means the OpenAI SDK default endpoint
DEFAULT_AI_BASE_URL: Optional[str] = None

# AI analysis temperature setting (lower = more consistent)
AI_ANALYSIS_TEMPERATURE: float = 0.1

# Seconds before the chat-completion request is abandoned
AI_REQUEST_TIMEOUT: float = 60.0


# ============================================================================
# OUTPUT FORMATTING
# ============================================================================

DEFAULT_SUMMARY_FILE: str = "summary.md"
CHARTS_SUBDIR: str = "charts"

# Sanitized titles are cut to this many characters
MAX_FILENAME_TITLE_LENGTH: int = 50

# Label chart keeps only the most used labels
MAX_CHART_LABELS: int = 10
NO_LABEL_BUCKET: str = "no-label"

TIMESTAMP_FORMAT: str = "%Y-%m-%d %H:%M:%S"
DATE_FORMAT: str = "%Y-%m-%d"
MONTH_FORMAT: str = "%Y-%m"


# ============================================================================
# ENVIRONMENT VARIABLE HELPERS
# ============================================================================

def get_github_token(environ: Optional[Mapping[str, str]] = None) -> str:
    """Get GitHub token from environment variables."""
    environ = os.environ if environ is None else environ
    return environ.get('GITHUB_TOKEN', '')

def get_ai_token(environ: Optional[Mapping[str, str]] = None) -> str:
    """Get AI API token from environment variables, OPENAI_API_KEY as fallback."""
    environ = os.environ if environ is None else environ
    return environ.get('AI_TOKEN', '') or environ.get('OPENAI_API_KEY', '')


# ============================================================================
# CONFIGURATION FILE
# ============================================================================

# TOML key -> settings field
CONFIG_FILE_KEYS: Dict[str, str] = {
    'gitHubToken': 'github_token',
    'aiToken': 'ai_token',
    'aiModel': 'ai_model',
    'aiBaseUrl': 'ai_base_url',
    'commentEnable': 'with_comments',
    'aiEnable': 'with_ai_summary',
    'chartEnable': 'with_charts',
    'outputDir': 'output_dir',
    'summaryFile': 'summary_file',
    'skipPullRequests': 'skip_pull_requests',
}

BOOLEAN_FIELDS = ('with_comments', 'with_ai_summary', 'with_charts', 'skip_pull_requests')


@dataclass(frozen=True)
class IssueExportConfig:
    """Resolved settings for one run"""
    github_token: str = ''
    ai_token: str = ''
    ai_model: str = DEFAULT_AI_MODEL
    ai_base_url: Optional[str] = DEFAULT_AI_BASE_URL
    with_comments: bool = True
    with_ai_summary: bool = False
    with_charts: bool = False
    skip_pull_requests: bool = False
    output_dir: str = ''
    summary_file: str = DEFAULT_SUMMARY_FILE


def load_config_file(path: str) -> Dict[str, Any]:
    """
    Read a TOML config file and map its keys to settings field names.

    Only keys actually present in the file appear in the result, so an absent
    boolean never overrides a command-line flag.

    Raises:
        ConfigError: file missing, unreadable, invalid TOML or a toggle that
            is not a boolean
    """
    config_path = Path(path)
    try:
        with open(config_path, 'rb') as f:
            raw = tomllib.load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"Config file not found: {config_path}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in config file {config_path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read config file {config_path}: {e}") from e

    values: Dict[str, Any] = {}
    for key, field_name in CONFIG_FILE_KEYS.items():
        if key not in raw:
            continue
        value = raw[key]
        if field_name in BOOLEAN_FIELDS:
            if not isinstance(value, bool):
                raise ConfigError(f"Config key '{key}' in {config_path} must be true or false")
        elif value is not None and not isinstance(value, str):
            raise ConfigError(f"Config key '{key}' in {config_path} must be a string")
        values[field_name] = value
    return values


def _pick_string(file_value: Optional[str], flag_value: Optional[str],
                 env_value: str = '', default: Optional[str] = '') -> Optional[str]:
    for candidate in (file_value, flag_value, env_value):
        if candidate:
            return candidate
    return default


def _pick_bool(field_name: str, file_values: Mapping[str, Any], flag_value: Optional[bool], default: bool) -> bool:
    if field_name in file_values:
        return file_values[field_name]
    if flag_value is not None:
        return flag_value
    return default


def resolve_config(flags: Mapping[str, Any], file_values: Optional[Mapping[str, Any]] = None,
                   environ: Optional[Mapping[str, str]] = None) -> IssueExportConfig:
    """
    Merge the config file, command-line flags and environment.

    Precedence is file > flag > environment > default. Strings count only
    when non-empty; booleans from the file count only when the key is set.

    Args:
        flags: settings field name -> flag value (None when the flag was not given)
        file_values: output of load_config_file, if a config file was supplied
        environ: environment mapping, os.environ when omitted
    """
    file_values = file_values or {}
    environ = os.environ if environ is None else environ
    defaults = IssueExportConfig()

    return IssueExportConfig(
        github_token=_pick_string(file_values.get('github_token'), flags.get('github_token'),
                                  get_github_token(environ)),
        ai_token=_pick_string(file_values.get('ai_token'), flags.get('ai_token'),
                              get_ai_token(environ)),
        ai_model=_pick_string(file_values.get('ai_model'), flags.get('ai_model'),
                              default=defaults.ai_model),
        ai_base_url=_pick_string(file_values.get('ai_base_url'), flags.get('ai_base_url'),
                                 default=defaults.ai_base_url),
        with_comments=_pick_bool('with_comments', file_values, flags.get('with_comments'),
                                 defaults.with_comments),
        with_ai_summary=_pick_bool('with_ai_summary', file_values, flags.get('with_ai_summary'),
                                   defaults.with_ai_summary),
        with_charts=_pick_bool('with_charts', file_values, flags.get('with_charts'),
                               defaults.with_charts),
        skip_pull_requests=_pick_bool('skip_pull_requests', file_values, flags.get('skip_pull_requests'),
                                      defaults.skip_pull_requests),
        output_dir=_pick_string(file_values.get('output_dir'), flags.get('output_dir')),
        summary_file=_pick_string(file_values.get('summary_file'), flags.get('summary_file'),
                                  default=defaults.summary_file),
    )


__all__ = [
    'GITHUB_API_URL',
    'ISSUES_PER_PAGE',
    'DEFAULT_AI_MODEL',
    'DEFAULT_AI_BASE_URL',
    'AI_ANALYSIS_TEMPERATURE',
    'AI_REQUEST_TIMEOUT',
    'DEFAULT_SUMMARY_FILE',
    'CHARTS_SUBDIR',
    'MAX_FILENAME_TITLE_LENGTH',
    'MAX_CHART_LABELS',
    'NO_LABEL_BUCKET',
    'TIMESTAMP_FORMAT',
    'DATE_FORMAT',
    'MONTH_FORMAT',
    'IssueExportConfig',
    'get_github_token',
    'get_ai_token',
    'load_config_file',
    'resolve_config',
]
