#!/usr/bin/env python3
"""
Unit tests for github_fetcher.py - GitHub issue and comment listing
"""
# /// script
# requires-python = ">=3.11"
# dependencies = [
#     "requests",
#     "rich",
#     "pytest",
# ]
# ///

import unittest
from unittest.mock import Mock, patch
import io
import math
import os
import sys

import requests
from rich.console import Console

# Add parent directory to path to import modules
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from errors import FetchError
from github_fetcher import GitHubIssueFetcher
from status_display import StatusDisplay


def make_raw_issue(number, **overrides):
    issue = {
        "number": number,
        "title": f"Issue {number}",
        "state": "open",
        "body": "",
        "created_at": "2024-01-15T10:00:00Z",
        "updated_at": "2024-01-16T10:00:00Z",
        "closed_at": None,
        "user": {"login": "octocat"},
        "labels": [],
        "assignees": [],
        "milestone": None,
        "html_url": f"https://github.com/test_owner/test_repo/issues/{number}",
    }
    issue.update(overrides)
    return issue


def make_response(payload, next_url=None, status_code=200, text="", headers=None):
    response = Mock()
    response.status_code = status_code
    response.text = text
    response.headers = headers or {}
    response.json.return_value = payload
    response.links = {'next': {'url': next_url}} if next_url else {}
    return response


def paged_responses(total):
    """Pages of 100 linked by next URLs, the last one partial"""
    pages = max(math.ceil(total / 100), 1)
    responses = []
    for page in range(pages):
        numbers = range(page * 100 + 1, min((page + 1) * 100, total) + 1)
        next_url = f"https://api.github.com/repositories/1/issues?page={page + 2}" if page < pages - 1 else None
        responses.append(make_response([make_raw_issue(n) for n in numbers], next_url))
    return responses


class TestGitHubIssueFetcher(unittest.TestCase):
    """Test the GitHubIssueFetcher class"""

    def setUp(self):
        """Set up test fixtures"""
        self.session = requests.Session()
        self.status = StatusDisplay(Console(file=io.StringIO()))
        self.sleep = Mock()
        self.fetcher = GitHubIssueFetcher("fake_token", "test_owner", "test_repo",
                                          session=self.session, status=self.status, sleep=self.sleep)

    def test_init(self):
        """Test bearer token header and repository fields"""
        self.assertEqual(self.fetcher.owner, "test_owner")
        self.assertEqual(self.fetcher.repo, "test_repo")
        self.assertEqual(self.session.headers['Authorization'], "Bearer fake_token")

    def test_anonymous_access(self):
        """No Authorization header without a token"""
        session = requests.Session()
        GitHubIssueFetcher("", "test_owner", "test_repo", session=session, status=self.status)
        self.assertNotIn('Authorization', session.headers)

    def test_fetch_issues_basic(self):
        """Single page, request parameters and field mapping"""
        raw = make_raw_issue(123, labels=[{"name": "feature"}], assignees=[{"login": "dev1"}],
                             milestone={"title": "v1.0"}, body="Details")
        with patch.object(self.session, 'get', return_value=make_response([raw])) as mock_get:
            issues = self.fetcher.fetch_issues()

        self.assertEqual(len(issues), 1)
        issue = issues[0]
        self.assertEqual(issue.number, 123)
        self.assertEqual(issue.labels, ("feature",))
        self.assertEqual(issue.assignees, ("dev1",))
        self.assertEqual(issue.milestone, "v1.0")
        self.assertEqual(issue.author, "octocat")

        url = mock_get.call_args.args[0]
        params = mock_get.call_args.kwargs['params']
        self.assertEqual(url, "https://api.github.com/repos/test_owner/test_repo/issues")
        self.assertEqual(params['state'], 'all')
        self.assertEqual(params['per_page'], 100)

    def test_fetch_issues_with_pagination(self):
        """Next-page URLs are followed until the server stops sending one"""
        responses = paged_responses(250)
        with patch.object(self.session, 'get', side_effect=responses) as mock_get:
            issues = self.fetcher.fetch_issues()

        self.assertEqual(len(issues), 250)
        self.assertEqual(mock_get.call_count, 3)
        self.assertEqual([issue.number for issue in issues], list(range(1, 251)))
        # Follow-up requests use the next URL as is
        second_call = mock_get.call_args_list[1]
        self.assertEqual(second_call.args[0], "https://api.github.com/repositories/1/issues?page=2")
        self.assertIsNone(second_call.kwargs['params'])

    def test_page_count_matches_issue_total(self):
        """ceil(total / 100) requests for various totals"""
        for total in (1, 99, 100, 101, 300, 301):
            with self.subTest(total=total):
                fetcher = GitHubIssueFetcher("fake_token", "test_owner", "test_repo",
                                             session=self.session, status=self.status)
                with patch.object(self.session, 'get', side_effect=paged_responses(total)) as mock_get:
                    issues = fetcher.fetch_issues()
                self.assertEqual(len(issues), total)
                self.assertEqual(mock_get.call_count, math.ceil(total / 100))
                self.assertEqual(fetcher.pages_fetched, math.ceil(total / 100))

    def test_server_order_preserved(self):
        """Issues are not re-sorted"""
        raw = [make_raw_issue(5), make_raw_issue(9), make_raw_issue(1)]
        with patch.object(self.session, 'get', return_value=make_response(raw)):
            issues = self.fetcher.fetch_issues()
        self.assertEqual([issue.number for issue in issues], [5, 9, 1])

    def test_skip_pull_requests(self):
        """Pull requests are dropped only on request"""
        raw = [make_raw_issue(1), make_raw_issue(2, pull_request={"url": "https://api.github.com/pulls/2"})]
        with patch.object(self.session, 'get', return_value=make_response(raw)):
            self.assertEqual(len(self.fetcher.fetch_issues()), 2)
        with patch.object(self.session, 'get', return_value=make_response(raw)):
            issues = self.fetcher.fetch_issues(skip_pull_requests=True)
        self.assertEqual([issue.number for issue in issues], [1])

    def test_failure_mid_pagination(self):
        """An error on a later page discards everything"""
        failing = make_response(None, status_code=500)
        failing.raise_for_status.side_effect = requests.exceptions.HTTPError("500 Server Error")
        responses = [make_response([make_raw_issue(1)], "https://api.github.com/next"), failing]

        with patch.object(self.session, 'get', side_effect=responses):
            with self.assertRaises(FetchError) as ctx:
                self.fetcher.fetch_issues()
        self.assertIn("page 2", str(ctx.exception))
        self.assertIn("test_owner/test_repo", str(ctx.exception))

    def test_transport_error(self):
        """Connection errors are wrapped in FetchError"""
        with patch.object(self.session, 'get', side_effect=requests.exceptions.ConnectionError("boom")):
            with self.assertRaises(FetchError) as ctx:
                self.fetcher.fetch_issues()
        self.assertIsInstance(ctx.exception.__cause__, requests.exceptions.ConnectionError)

    def test_unparsable_page(self):
        """Invalid JSON is wrapped in FetchError"""
        response = make_response(None)
        response.json.side_effect = ValueError("Expecting value")
        with patch.object(self.session, 'get', return_value=response):
            with self.assertRaises(FetchError):
                self.fetcher.fetch_issues()

    def test_rate_limit_handling(self):
        """A rate-limited page is retried after waiting for the reset"""
        rate_limited = make_response(None, status_code=403, text="API rate limit exceeded",
                                     headers={'X-RateLimit-Reset': '0'})
        success = make_response([make_raw_issue(1)])

        with patch.object(self.session, 'get', side_effect=[rate_limited, success]) as mock_get:
            issues = self.fetcher.fetch_issues()

        self.assertEqual(len(issues), 1)
        self.assertEqual(mock_get.call_count, 2)
        self.sleep.assert_called_with(1)

    def test_forbidden_without_rate_limit(self):
        """A plain 403 is a fetch failure, not a retry"""
        forbidden = make_response(None, status_code=403, text="Resource not accessible")
        forbidden.raise_for_status.side_effect = requests.exceptions.HTTPError("403 Forbidden")
        with patch.object(self.session, 'get', return_value=forbidden) as mock_get:
            with self.assertRaises(FetchError):
                self.fetcher.fetch_issues()
        self.assertEqual(mock_get.call_count, 1)
        self.sleep.assert_not_called()

    def test_fetch_comments(self):
        """Comments are paginated per issue"""
        first = make_response([{"user": {"login": "alice"}, "body": "First", "created_at": "2024-01-15T11:00:00Z"}],
                              "https://api.github.com/next-comments")
        second = make_response([{"user": None, "body": None, "created_at": "2024-01-15T12:00:00Z"}])

        with patch.object(self.session, 'get', side_effect=[first, second]) as mock_get:
            comments = self.fetcher.fetch_comments(42)

        self.assertEqual(mock_get.call_args_list[0].args[0],
                         "https://api.github.com/repos/test_owner/test_repo/issues/42/comments")
        self.assertEqual([c.author for c in comments], ["alice", "ghost"])
        self.assertEqual(comments[1].body, "")

    def test_fetch_comments_failure_names_issue(self):
        """Comment failures carry the issue number"""
        with patch.object(self.session, 'get', side_effect=requests.exceptions.Timeout("slow")):
            with self.assertRaises(FetchError) as ctx:
                self.fetcher.fetch_comments(7)
        self.assertIn("#7", str(ctx.exception))


if __name__ == '__main__':
    unittest.main()
