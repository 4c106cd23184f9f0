#!/usr/bin/env python3
"""
Repository locator

Turns the command-line repository reference into a RepoCoordinate. The
reference is either "." (read the origin remote from the local .git/config),
an HTTPS URL, an SSH URL or the owner/name shorthand.
"""

import logging
import re
from pathlib import Path
from typing import Optional, Union

from errors import ResolutionError
from models import RepoCoordinate

logger = logging.getLogger(__name__)

LOCAL_REPO_REFERENCE = "."

# Tried in order, first match wins
REPO_URL_PATTERNS = [
    ("HTTPS URL", re.compile(r'^https://[^/\s]+/([^/\s]+)/([^/\s]+?)(?:\.git)?/?$')),
    ("SSH URL", re.compile(r'^git@[^:\s]+:([^/\s]+)/([^/\s]+?)(?:\.git)?/?$')),
    ("shorthand", re.compile(r'^([^/\s:]+)/([^/\s]+?)(?:\.git)?/?$')),
]

ORIGIN_SECTION = '[remote "origin"]'


def parse_repo_url(repo_url: str) -> RepoCoordinate:
    """
    Parse the owner and repository name out of a URL or shorthand.

    Raises:
        ResolutionError: when no supported format matches
    """
    repo_url = repo_url.strip()

    for description, pattern in REPO_URL_PATTERNS:
        match = pattern.match(repo_url)
        if match:
            logger.debug("Parsed %s as %s", repo_url, description)
            return RepoCoordinate(owner=match.group(1), name=match.group(2))

    raise ResolutionError(f"Unrecognized repository reference: {repo_url!r}")


def read_origin_url(repo_dir: Union[str, Path, None] = None) -> str:
    """
    Find the URL of the origin remote in <repo_dir>/.git/config.

    Only the url key inside the [remote "origin"] block counts; the next
    section header ends the block.

    Raises:
        ResolutionError: no config file, or no origin url in it
    """
    config_path = Path(repo_dir or Path.cwd()) / ".git" / "config"

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            in_origin_section = False
            for raw_line in f:
                line = raw_line.strip()

                if line.startswith('['):
                    in_origin_section = line == ORIGIN_SECTION
                    continue

                if in_origin_section and '=' in line:
                    key, _, value = line.partition('=')
                    if key.strip() == 'url':
                        return value.strip()
    except FileNotFoundError as e:
        raise ResolutionError(f"No git config found at {config_path}") from e
    except OSError as e:
        raise ResolutionError(f"Failed to read {config_path}: {e}") from e

    raise ResolutionError(f"No origin remote URL in {config_path}")


def locate_repository(reference: str, repo_dir: Union[str, Path, None] = None) -> RepoCoordinate:
    """Resolve "." or a URL/shorthand reference to a repository"""
    if reference == LOCAL_REPO_REFERENCE:
        origin_url = read_origin_url(repo_dir)
        logger.debug("Origin remote URL: %s", origin_url)
        return parse_repo_url(origin_url)
    return parse_repo_url(reference)
