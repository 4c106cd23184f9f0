#!/usr/bin/env python3
"""
Data model for exported issues

Issues and comments are built once from the REST payload and never mutated.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from utils import extract_label_names, extract_login, generate_issue_url
from utils_dates import parse_issue_date


@dataclass(frozen=True)
class RepoCoordinate:
    """Owner and name of a GitHub repository"""
    owner: str
    name: str

    def __str__(self) -> str:
        return f"{self.owner}/{self.name}"


@dataclass(frozen=True)
class Comment:
    """A single comment on an issue"""
    author: str
    body: str
    created_at: datetime

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> 'Comment':
        return cls(
            author=extract_login(data.get('user')),
            body=data.get('body') or '',
            created_at=parse_issue_date(data['created_at']),
        )


@dataclass(frozen=True)
class Issue:
    """Container for one issue as returned by the list issues endpoint"""
    number: int
    title: str
    state: str
    created_at: datetime
    author: str
    html_url: str
    body: str = ''
    updated_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None
    labels: Tuple[str, ...] = field(default_factory=tuple)
    assignees: Tuple[str, ...] = field(default_factory=tuple)
    milestone: Optional[str] = None
    is_pull_request: bool = False

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> 'Issue':
        """Build an Issue from a REST issue object"""
        milestone = data.get('milestone') or {}
        assignees = data.get('assignees') or []
        if not assignees and data.get('assignee'):
            assignees = [data['assignee']]

        return cls(
            number=int(data['number']),
            title=data.get('title') or '',
            state=data.get('state') or 'unknown',
            created_at=parse_issue_date(data['created_at']),
            author=extract_login(data.get('user')),
            html_url=generate_issue_url(data),
            body=data.get('body') or '',
            updated_at=parse_issue_date(data.get('updated_at')),
            closed_at=parse_issue_date(data.get('closed_at')),
            labels=tuple(extract_label_names(data.get('labels'))),
            assignees=tuple(extract_login(user) for user in assignees),
            milestone=milestone.get('title') or None,
            is_pull_request=bool(data.get('pull_request')),
        )
