#!/usr/bin/env python3
"""
Shared date utilities for GitHub issue export
Used by models.py, markdown_writer.py, ai_service.py and chart_generator.py
"""

from datetime import datetime, timezone
from typing import Optional, Union

from config import DATE_FORMAT, MONTH_FORMAT, TIMESTAMP_FORMAT


def parse_issue_date(date_str: Union[str, datetime, None]) -> Optional[datetime]:
    """
    Parse ISO format date string from GitHub API.

    Args:
        date_str: ISO format date string like "2025-09-18T15:25:13Z"

    Returns:
        datetime object with timezone info (UTC when the string has none),
        or None for an empty value
    """
    if not date_str:
        return None
    if isinstance(date_str, str):
        parsed = datetime.fromisoformat(date_str.replace('Z', '+00:00'))
    else:
        parsed = date_str
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """Format as YYYY-MM-DD HH:MM:SS in UTC"""
    return _as_utc(value).strftime(TIMESTAMP_FORMAT)


def format_date(value: datetime) -> str:
    """Format as YYYY-MM-DD in UTC"""
    return _as_utc(value).strftime(DATE_FORMAT)


def month_key(value: datetime) -> str:
    """Calendar month bucket (YYYY-MM, UTC) of a timestamp"""
    return _as_utc(value).strftime(MONTH_FORMAT)
