#!/usr/bin/env python3
"""
AI Summary Service for GitHub Issues
Sends every issue in one chat-completion prompt and writes the returned
analysis, followed by a linked issue table, to the summary file.
"""

import logging
from pathlib import Path
from typing import List, Optional, Sequence, Union

import openai
from openai import OpenAI

from config import (
    AI_ANALYSIS_TEMPERATURE,
    AI_REQUEST_TIMEOUT,
    DEFAULT_AI_MODEL,
)
from errors import AIRequestError, FileIOError
from models import Issue
from utils import escape_table_cell, format_labels_for_display
from utils_dates import format_date

logger = logging.getLogger(__name__)

SUMMARY_INSTRUCTION = (
    "Below is the list of issues of a GitHub repository. "
    "Analyze these issues and provide a summary of the main themes, "
    "recurring problems and the overall state of the project."
)


def build_issue_table(issues: Sequence[Issue], with_links: bool = False) -> List[str]:
    """Markdown table with number, title, state, created date and labels"""
    lines = [
        "| Number | Title | State | Created | Labels |",
        "|--------|-------|-------|---------|--------|",
    ]
    for issue in issues:
        number = f"[#{issue.number}]({issue.html_url})" if with_links else f"#{issue.number}"
        lines.append(
            f"| {number} | {escape_table_cell(issue.title)} | {issue.state} "
            f"| {format_date(issue.created_at)} | {escape_table_cell(format_labels_for_display(issue.labels))} |"
        )
    return lines


def build_summary_prompt(issues: Sequence[Issue]) -> str:
    """Instruction, issue table, then every non-empty description"""
    lines = [SUMMARY_INSTRUCTION, ""]
    lines.extend(build_issue_table(issues))
    lines.append("")

    for issue in issues:
        if issue.body:
            lines.extend([f"**Issue #{issue.number} description**:", issue.body, ""])

    return "\n".join(lines)


class AISummaryService:
    """Service for the AI-generated issue summary"""

    def __init__(self, client: OpenAI, model: str = DEFAULT_AI_MODEL):
        self.client = client
        self.model = model

    @classmethod
    def create_from_settings(cls, api_key: str, model: str = DEFAULT_AI_MODEL,
                             base_url: Optional[str] = None,
                             timeout: float = AI_REQUEST_TIMEOUT) -> 'AISummaryService':
        """Create service instance for an OpenAI-compatible endpoint"""
        client = OpenAI(api_key=api_key, base_url=base_url, timeout=timeout, max_retries=0)
        return cls(client, model)

    def complete(self, prompt: str) -> str:
        """
        Run one chat completion and return its text.

        Raises:
            AIRequestError: transport failure, timeout, non-success status,
                malformed response or empty completion
        """
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=AI_ANALYSIS_TEMPERATURE
            )
        except openai.APIStatusError as e:
            raise AIRequestError(f"AI endpoint returned HTTP {e.status_code}: {e.message}") from e
        except openai.OpenAIError as e:
            raise AIRequestError(f"AI request failed: {e}") from e

        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError, TypeError) as e:
            raise AIRequestError(f"Malformed AI response: {e}") from e

        if not content or not content.strip():
            raise AIRequestError("AI response has no content")

        return content.strip()

    def generate_summary(self, issues: Sequence[Issue], output_dir: Union[str, Path],
                         summary_file: str) -> Path:
        """
        Write the AI analysis plus the linked issue table to output_dir/summary_file.

        Nothing is written unless the completion succeeds.
        """
        logger.info("Requesting AI summary of %d issues from model %s", len(issues), self.model)
        analysis = self.complete(build_summary_prompt(issues))

        lines = [
            "# GitHub Issues Summary",
            "",
            "*Generated by AI*",
            "",
            "## AI Analysis",
            "",
            analysis,
            "",
            "## Issues",
            "",
        ]
        lines.extend(build_issue_table(issues, with_links=True))

        path = Path(output_dir) / summary_file
        try:
            path.write_text("\n".join(lines) + "\n", encoding='utf-8')
        except OSError as e:
            raise FileIOError(f"Failed to write summary to {path}: {e}") from e

        return path
