#!/usr/bin/env python3
"""
Markdown export of single issues
Renders an issue and its comment thread into one markdown document and writes
it as issue_<number>_<title>.md
"""

import logging
from pathlib import Path
from typing import List, Optional, Sequence, Union

from config import MAX_FILENAME_TITLE_LENGTH
from errors import FileIOError
from models import Comment, Issue
from utils import format_labels_for_display
from utils_dates import format_timestamp

logger = logging.getLogger(__name__)

ILLEGAL_FILENAME_CHARS = '/\\:*?"<>|\n\r'
_FILENAME_TRANSLATION = str.maketrans({char: '_' for char in ILLEGAL_FILENAME_CHARS})


def sanitize_filename(title: str) -> str:
    """Replace characters that are illegal in filenames, cut to 50 chars and trim"""
    cleaned = title.translate(_FILENAME_TRANSLATION)
    return cleaned[:MAX_FILENAME_TITLE_LENGTH].strip()


def issue_filename(issue: Issue) -> str:
    return f"issue_{issue.number}_{sanitize_filename(issue.title)}.md"


def _basic_info_lines(issue: Issue) -> List[str]:
    lines = [
        "## Basic Info",
        "",
        f"- **Number**: #{issue.number}",
        f"- **State**: {issue.state}",
        f"- **Author**: @{issue.author}",
        f"- **Created**: {format_timestamp(issue.created_at)}",
    ]

    if issue.updated_at:
        lines.append(f"- **Updated**: {format_timestamp(issue.updated_at)}")
    if issue.closed_at:
        lines.append(f"- **Closed**: {format_timestamp(issue.closed_at)}")
    if issue.labels:
        lines.append(f"- **Labels**: {format_labels_for_display(issue.labels, code=True)}")
    if issue.assignees:
        lines.append(f"- **Assignees**: {', '.join('@' + login for login in issue.assignees)}")
    if issue.milestone:
        lines.append(f"- **Milestone**: {issue.milestone}")

    lines.append(f"- **URL**: {issue.html_url}")
    lines.append("")
    return lines


def _comment_lines(comments: Sequence[Comment]) -> List[str]:
    lines = ["---", "", "## Comments", ""]
    for comment in comments:
        lines.extend([
            f"### @{comment.author} commented at {format_timestamp(comment.created_at)}",
            "",
            comment.body,
            "",
            "---",
            "",
        ])
    return lines


def render_issue_markdown(issue: Issue, comments: Optional[Sequence[Comment]] = None) -> str:
    """
    Render one issue as markdown.

    Sections come in a fixed order: title, basic info, description (only
    when the body is not empty) and comments (only when there are any).
    """
    lines = [f"# Issue #{issue.number}: {issue.title}", ""]
    lines.extend(_basic_info_lines(issue))

    if issue.body:
        lines.extend(["## Description", "", issue.body, ""])

    if comments:
        lines.extend(_comment_lines(comments))

    return "\n".join(lines) + "\n"


def write_issue_markdown(issue: Issue, output_dir: Union[str, Path],
                         comments: Optional[Sequence[Comment]] = None) -> Path:
    """
    Write the rendered issue into output_dir.

    Raises:
        FileIOError: the file could not be written
    """
    path = Path(output_dir) / issue_filename(issue)
    content = render_issue_markdown(issue, comments)

    try:
        path.write_text(content, encoding='utf-8')
    except OSError as e:
        raise FileIOError(f"Failed to write issue #{issue.number} to {path}: {e}") from e

    logger.debug("Wrote issue #%d to %s", issue.number, path)
    return path
