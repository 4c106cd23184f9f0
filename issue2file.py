#!/usr/bin/env python3
"""
issue2file

Fetches every issue of a GitHub repository and writes each one as a markdown
file. Optionally adds an AI-generated summary of all issues and HTML charts
of the state, label and creation-time distribution.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from rich.logging import RichHandler

from ai_service import AISummaryService
from chart_generator import generate_charts
from config import IssueExportConfig, load_config_file, resolve_config
from errors import (
    AIRequestError,
    ChartRenderError,
    ConfigError,
    FetchError,
    FileIOError,
    ResolutionError,
)
from github_fetcher import GitHubIssueFetcher
from markdown_writer import write_issue_markdown
from models import Issue, RepoCoordinate
from repo_locator import locate_repository
from status_display import StatusDisplay

logger = logging.getLogger("issue2file")

USAGE_EXAMPLES = '''
Examples:
  issue2file .                                   # issues of the git repository in the current directory
  issue2file --token=xxx owner/repo              # use a GitHub token
  issue2file --ai-summary --ai-token=xxx owner/repo
  issue2file --charts https://github.com/owner/repo
  issue2file --config issue2file.toml owner/repo

Settings precedence: config file > command-line flag > environment
(GITHUB_TOKEN, AI_TOKEN / OPENAI_API_KEY) > default.
'''


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='issue2file',
        description='Export GitHub issues to markdown files',
        epilog=USAGE_EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument('repository', nargs='?', help='Repository: ".", owner/repo, or an HTTPS/SSH URL')
    parser.add_argument('--token', dest='github_token', help='GitHub API token')
    parser.add_argument('--ai-token', dest='ai_token', help='AI API token')
    parser.add_argument('--ai-model', dest='ai_model', help='AI model name')
    parser.add_argument('--ai-base-url', dest='ai_base_url', help='Base URL of an OpenAI-compatible API')
    parser.add_argument('--comments', dest='with_comments', action=argparse.BooleanOptionalAction, default=None,
                        help='Download issue comments (default: on)')
    parser.add_argument('--ai-summary', dest='with_ai_summary', action=argparse.BooleanOptionalAction, default=None,
                        help='Write an AI summary of all issues (default: off)')
    parser.add_argument('--charts', dest='with_charts', action=argparse.BooleanOptionalAction, default=None,
                        help='Generate HTML charts (default: off)')
    parser.add_argument('--skip-pull-requests', dest='skip_pull_requests', action=argparse.BooleanOptionalAction,
                        default=None, help='Leave out pull requests (default: off)')
    parser.add_argument('--output', '-o', dest='output_dir', help='Output directory (default: issues_OWNER_REPO)')
    parser.add_argument('--summary-file', dest='summary_file', help='AI summary file name (default: summary.md)')
    parser.add_argument('--config', '-c', dest='config_file', help='TOML configuration file')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable debug logging')
    return parser


def setup_logging(verbose: bool = False):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(show_path=False)],
        force=True,
    )


def export_issues(issues: List[Issue], fetcher: GitHubIssueFetcher, output_dir: Path,
                  with_comments: bool, status: StatusDisplay) -> int:
    """Write one markdown file per issue; failures are logged and skipped"""
    written = 0
    for issue in issues:
        try:
            comments = fetcher.fetch_comments(issue.number) if with_comments else None
            write_issue_markdown(issue, output_dir, comments)
        except (FetchError, FileIOError) as e:
            logger.error("Failed to save issue #%d: %s", issue.number, e)
            continue
        written += 1
        status.print(f"Saved issue #{issue.number}: {issue.title}")
    return written


def run_ai_summary(issues: List[Issue], output_dir: Path, settings: IssueExportConfig, status: StatusDisplay):
    if not settings.ai_token:
        logger.warning("AI summary enabled but no AI token provided, skipping analysis")
        return

    status.print("🤖 Analyzing issues with AI...")
    service = AISummaryService.create_from_settings(settings.ai_token, settings.ai_model, settings.ai_base_url)
    try:
        path = service.generate_summary(issues, output_dir, settings.summary_file)
    except (AIRequestError, FileIOError) as e:
        logger.error("AI summary failed: %s", e)
        return
    status.print(f"✅ AI summary saved to: {path}", style="green")


def run_charts(issues: List[Issue], output_dir: Path, status: StatusDisplay):
    status.print("📊 Generating charts...")
    try:
        charts_dir = generate_charts(issues, output_dir)
    except ChartRenderError as e:
        logger.error("Chart generation failed: %s", e)
        return
    status.print(f"✅ Charts saved to: {charts_dir}", style="green")


def main(argv: Optional[List[str]] = None) -> int:
    """Main execution function, returns the process exit status"""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.repository:
        parser.print_help()
        return 1

    setup_logging(args.verbose)

    # Load environment variables from .env file
    load_dotenv()

    try:
        file_values = load_config_file(args.config_file) if args.config_file else {}
    except ConfigError as e:
        logger.critical("Cannot load configuration: %s", e)
        return 1

    settings = resolve_config(vars(args), file_values)

    try:
        repo: RepoCoordinate = locate_repository(args.repository)
    except ResolutionError as e:
        logger.critical("Cannot determine repository: %s", e)
        return 1

    status = StatusDisplay()
    fetcher = GitHubIssueFetcher(settings.github_token, repo.owner, repo.name, status=status)

    try:
        issues = fetcher.fetch_issues(skip_pull_requests=settings.skip_pull_requests)
    except FetchError as e:
        logger.critical("Cannot fetch issues: %s", e)
        return 1

    output_dir = Path(settings.output_dir or f"issues_{repo.owner}_{repo.name}")
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.critical("Cannot create output directory %s: %s", output_dir, e)
        return 1

    written = export_issues(issues, fetcher, output_dir, settings.with_comments, status)
    status.print(f"✅ Done! Saved {written} of {len(issues)} issues to: {output_dir}", style="green bold")

    if settings.with_ai_summary:
        run_ai_summary(issues, output_dir, settings, status)

    if settings.with_charts:
        run_charts(issues, output_dir, status)

    return 0


def run():
    """Console script entry point"""
    sys.exit(main())


if __name__ == "__main__":
    run()
