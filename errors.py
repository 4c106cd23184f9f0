#!/usr/bin/env python3
"""
Exception types for the issue export pipeline

Fatal errors (resolution, issue fetch, output directory) stop the run.
Everything else is caught by the orchestrator at the issue or feature level.
"""


class IssueExportError(Exception):
    """Base class for all errors raised by issue2file"""
    pass


class ResolutionError(IssueExportError):
    """Raised when the owner/repository cannot be determined"""
    pass


class FetchError(IssueExportError):
    """Raised when listing issues or comments fails"""
    pass


class FileIOError(IssueExportError):
    """Raised when a directory cannot be created or a file cannot be written"""
    pass


class AIRequestError(IssueExportError):
    """Raised on transport errors, bad status or an empty AI completion"""
    pass


class ChartRenderError(IssueExportError):
    """Raised when a chart cannot be rendered or written"""
    pass


class ConfigError(IssueExportError):
    """Raised when the configuration file is missing or invalid"""
    pass
