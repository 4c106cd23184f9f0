#!/usr/bin/env python3
"""
Unit tests for ai_service.py - AI summary generation
"""
# /// script
# requires-python = ">=3.11"
# dependencies = [
#     "openai",
#     "pytest",
# ]
# ///

import unittest
from unittest.mock import Mock, patch
import os
import sys
import tempfile
from pathlib import Path

import httpx
import openai

# Add parent directory to path to import modules
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from ai_service import AISummaryService, build_issue_table, build_summary_prompt
from errors import AIRequestError
from models import Issue


def make_issue(number, title, state, created_at, labels, body=""):
    return Issue.from_api({
        "number": number,
        "title": title,
        "state": state,
        "body": body,
        "created_at": created_at,
        "user": {"login": "octocat"},
        "labels": [{"name": name} for name in labels],
        "html_url": f"https://github.com/owner/repo/issues/{number}",
    })


def make_completion(content):
    response = Mock()
    response.choices = [Mock()]
    response.choices[0].message.content = content
    return response


class TestPromptBuilding(unittest.TestCase):
    """Test the issue table and prompt"""

    def setUp(self):
        """Set up test fixtures"""
        self.issues = [
            make_issue(1, "Login fails", "open", "2024-01-05T10:00:00Z", ["bug"], body="Cannot log in"),
            make_issue(2, "Dark | light theme", "closed", "2024-01-20T10:00:00Z", ["bug", "ui"]),
        ]

    def test_issue_table(self):
        """One row per issue with escaped cells"""
        table = build_issue_table(self.issues)
        self.assertEqual(table[0], "| Number | Title | State | Created | Labels |")
        self.assertEqual(table[2], "| #1 | Login fails | open | 2024-01-05 | bug |")
        self.assertEqual(table[3], "| #2 | Dark \\| light theme | closed | 2024-01-20 | bug, ui |")

    def test_issue_table_with_links(self):
        """Linked table points at the issue web URLs"""
        table = build_issue_table(self.issues, with_links=True)
        self.assertTrue(table[2].startswith("| [#1](https://github.com/owner/repo/issues/1) |"))

    def test_prompt_contains_descriptions(self):
        """Only non-empty bodies become description sections"""
        prompt = build_summary_prompt(self.issues)
        self.assertIn("**Issue #1 description**:\nCannot log in", prompt)
        self.assertNotIn("**Issue #2 description**", prompt)
        self.assertIn("| #2 |", prompt)


class TestAISummaryService(unittest.TestCase):
    """Test the chat completion call and summary file"""

    def setUp(self):
        """Set up test fixtures"""
        self.temp_dir = tempfile.TemporaryDirectory()
        self.output_dir = Path(self.temp_dir.name)
        self.client = Mock()
        self.service = AISummaryService(self.client, model="test-model")
        self.issues = [
            make_issue(1, "Login fails", "open", "2024-01-05T10:00:00Z", ["bug"], body="Cannot log in"),
        ]

    def tearDown(self):
        """Clean up test fixtures"""
        self.temp_dir.cleanup()

    @patch('ai_service.OpenAI')
    def test_create_from_settings(self, mock_openai):
        """Client is built with key, base URL and timeout"""
        service = AISummaryService.create_from_settings("key", "deepseek-chat", "https://api.deepseek.com")

        mock_openai.assert_called_once_with(api_key="key", base_url="https://api.deepseek.com",
                                            timeout=60.0, max_retries=0)
        self.assertEqual(service.model, "deepseek-chat")

    def test_complete(self):
        """Single user message with the configured model"""
        self.client.chat.completions.create.return_value = make_completion("  Analysis text \n")

        self.assertEqual(self.service.complete("prompt"), "Analysis text")
        kwargs = self.client.chat.completions.create.call_args.kwargs
        self.assertEqual(kwargs['model'], "test-model")
        self.assertEqual(kwargs['messages'], [{"role": "user", "content": "prompt"}])

    def test_empty_completion(self):
        """Empty or missing content is an error"""
        for content in ("", "   ", None):
            with self.subTest(content=content):
                self.client.chat.completions.create.return_value = make_completion(content)
                with self.assertRaises(AIRequestError):
                    self.service.complete("prompt")

    def test_no_choices(self):
        """A response without choices is malformed"""
        response = Mock()
        response.choices = []
        self.client.chat.completions.create.return_value = response
        with self.assertRaises(AIRequestError):
            self.service.complete("prompt")

    def test_transport_failure(self):
        """Connection errors become AIRequestError"""
        request = httpx.Request("POST", "https://api.example.com/v1/chat/completions")
        self.client.chat.completions.create.side_effect = openai.APIConnectionError(request=request)
        with self.assertRaises(AIRequestError):
            self.service.complete("prompt")

    def test_error_status(self):
        """Non-success HTTP status becomes AIRequestError with the status code"""
        request = httpx.Request("POST", "https://api.example.com/v1/chat/completions")
        response = httpx.Response(401, request=request)
        self.client.chat.completions.create.side_effect = openai.AuthenticationError(
            "Invalid API key", response=response, body=None)
        with self.assertRaises(AIRequestError) as ctx:
            self.service.complete("prompt")
        self.assertIn("401", str(ctx.exception))

    def test_generate_summary(self):
        """Summary file holds the analysis followed by the linked table"""
        self.client.chat.completions.create.return_value = make_completion("Mostly login problems.")

        path = self.service.generate_summary(self.issues, self.output_dir, "summary.md")

        self.assertEqual(path, self.output_dir / "summary.md")
        content = path.read_text(encoding="utf-8")
        self.assertIn("## AI Analysis\n\nMostly login problems.", content)
        self.assertLess(content.index("Mostly login problems."), content.index("## Issues"))
        self.assertIn("| [#1](https://github.com/owner/repo/issues/1) | Login fails | open | 2024-01-05 | bug |",
                      content)

    def test_failed_request_writes_nothing(self):
        """No partial summary file on failure"""
        self.client.chat.completions.create.return_value = make_completion("")
        with self.assertRaises(AIRequestError):
            self.service.generate_summary(self.issues, self.output_dir, "summary.md")
        self.assertFalse((self.output_dir / "summary.md").exists())


if __name__ == '__main__':
    unittest.main()
