#!/usr/bin/env python3
"""
GitHub Issues Fetcher

Lists every issue of a repository (and, per issue, its comments) through the
REST API, following the Link header's next-page cursor until the server stops
advertising one. A failure on any page aborts the whole listing.
"""

import logging
import time
from typing import Any, Callable, Dict, List, Optional

import requests

from config import GITHUB_API_URL, ISSUES_PER_PAGE
from errors import FetchError
from models import Comment, Issue
from status_display import StatusDisplay

logger = logging.getLogger(__name__)


class GitHubIssueFetcher:
    """Fetch issues and comments for one repository"""

    def __init__(self, token: str, owner: str, repo: str,
                 session: Optional[requests.Session] = None,
                 status: Optional[StatusDisplay] = None,
                 sleep: Callable[[float], None] = time.sleep):
        self.token = token
        self.owner = owner
        self.repo = repo
        self.base_url = GITHUB_API_URL
        self.session = session or requests.Session()
        self.session.headers.update({
            'Accept': 'application/vnd.github+json',
            'User-Agent': 'issue2file'
        })
        if token:
            self.session.headers['Authorization'] = f'Bearer {token}'
        else:
            logger.warning("No GitHub token provided, using anonymous access (stricter rate limits)")
        self.status = status or StatusDisplay()
        self._sleep = sleep
        self.pages_fetched = 0

    def _wait_for_rate_limit(self, response: requests.Response):
        """Sleep until the rate limit window resets, showing a countdown"""
        reset_time = int(response.headers.get('X-RateLimit-Reset', 0))
        sleep_time = int(max(reset_time - time.time(), 0)) + 1

        logger.warning("GitHub rate limit reached, waiting %ds", sleep_time)
        for elapsed in range(sleep_time):
            self.status.update(f"⏳ Rate limited - waiting {sleep_time - elapsed}s before retry...", style="yellow")
            self._sleep(1)

    def _make_request(self, url: str, params: Optional[Dict[str, Any]] = None) -> requests.Response:
        """Make GitHub API request, retrying once after a rate limit wait"""
        response = self.session.get(url, params=params)

        # 403 is either rate limiting or a permissions problem
        if response.status_code == 403 and 'rate limit' in response.text.lower():
            self._wait_for_rate_limit(response)
            response = self.session.get(url, params=params)

        response.raise_for_status()
        return response

    def _paginate(self, url: str, params: Dict[str, Any], what: str) -> List[Dict[str, Any]]:
        """Collect every page of a list endpoint"""
        items: List[Dict[str, Any]] = []
        page = 1
        next_url: Optional[str] = url
        next_params: Optional[Dict[str, Any]] = params

        while next_url:
            self.status.update(f"📥 Fetching {what}, page {page}...", style="cyan")
            try:
                response = self._make_request(next_url, next_params)
                batch = response.json()
            except requests.exceptions.RequestException as e:
                raise FetchError(f"Failed to fetch {what} (page {page}): {e}") from e
            except ValueError as e:
                raise FetchError(f"Unparsable response for {what} (page {page}): {e}") from e

            if not isinstance(batch, list):
                raise FetchError(f"Unexpected response for {what} (page {page}): expected a list")

            items.extend(batch)
            self.pages_fetched += 1
            self.status.update(f"📊 Page {page}: {len(batch)} items | Total: {len(items)}", style="cyan")

            # The next URL already carries the query string
            next_url = response.links.get('next', {}).get('url')
            next_params = None
            page += 1

        return items

    def fetch_issues(self, skip_pull_requests: bool = False) -> List[Issue]:
        """Fetch all issues (open and closed) in server order"""
        url = f"{self.base_url}/repos/{self.owner}/{self.repo}/issues"
        params = {
            'state': 'all',
            'per_page': ISSUES_PER_PAGE,
        }

        self.status.print(f"🔍 Fetching issues from {self.owner}/{self.repo}...")
        self.status.start("🔄 Initializing issue fetch...")
        try:
            raw_issues = self._paginate(url, params, f"issues of {self.owner}/{self.repo}")
        finally:
            self.status.stop()

        try:
            issues = [Issue.from_api(item) for item in raw_issues]
        except (KeyError, TypeError, ValueError) as e:
            raise FetchError(f"Malformed issue record from {self.owner}/{self.repo}: {e}") from e
        if skip_pull_requests:
            issues = [issue for issue in issues if not issue.is_pull_request]

        self.status.print(f"✅ Total issues fetched: {len(issues)}", style="green bold")
        return issues

    def fetch_comments(self, issue_number: int) -> List[Comment]:
        """Fetch all comments of one issue"""
        url = f"{self.base_url}/repos/{self.owner}/{self.repo}/issues/{issue_number}/comments"
        params = {'per_page': ISSUES_PER_PAGE}

        self.status.start(f"💬 Fetching comments for issue #{issue_number}...")
        try:
            raw_comments = self._paginate(url, params, f"comments of issue #{issue_number}")
        finally:
            self.status.stop()

        try:
            return [Comment.from_api(item) for item in raw_comments]
        except (KeyError, TypeError, ValueError) as e:
            raise FetchError(f"Malformed comment record for issue #{issue_number}: {e}") from e
