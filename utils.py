#!/usr/bin/env python3
"""
Shared utilities for GitHub issue processing
Contains URL generation, label handling and markdown table helpers
Used by models.py, markdown_writer.py and ai_service.py
"""

from typing import Any, Dict, Iterable, List, Optional, Union


def generate_issue_url(issue: Dict[str, Any], github_owner: Optional[str] = None, github_repo: Optional[str] = None) -> str:
    """
    Generate standardized GitHub issue URL from issue data.

    Args:
        issue: Issue dictionary containing number and optionally html_url
        github_owner: GitHub repository owner (optional if html_url is in issue)
        github_repo: GitHub repository name (optional if html_url is in issue)

    Returns:
        Web URL of the issue, or an empty string when it cannot be derived
    """
    if issue.get('html_url'):
        return issue['html_url']

    issue_num = issue.get('number')
    if github_owner and github_repo and issue_num:
        return f"https://github.com/{github_owner}/{github_repo}/issues/{issue_num}"

    return ""


def extract_label_names(raw_labels: Union[List, None]) -> List[str]:
    """
    Normalize labels to a list of names.

    Args:
        raw_labels: REST format (list of dicts with 'name') or list of strings
    """
    if not raw_labels:
        return []

    names = []
    for label in raw_labels:
        if isinstance(label, dict):
            name = label.get('name')
            if name:
                names.append(name)
        elif label:
            names.append(str(label))
    return names


def extract_login(user: Optional[Dict[str, Any]]) -> str:
    """Login of a REST user object; deleted accounts come back as null"""
    if not user:
        return "ghost"
    return user.get('login') or "ghost"


def format_labels_for_display(labels: Iterable[str], separator: str = ', ', code: bool = False) -> str:
    """
    Format label names for display in markdown.

    Args:
        labels: label names
        separator: String to join labels with (default: ', ')
        code: wrap each label in backticks
    """
    if code:
        return separator.join(f"`{label}`" for label in labels)
    return separator.join(labels)


def escape_table_cell(text: str) -> str:
    """Make text safe for a single markdown table cell"""
    return ' '.join(str(text).split()).replace('|', '\\|')
