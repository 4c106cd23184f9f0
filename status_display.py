#!/usr/bin/env python3
"""
Console status output shared by the fetcher and the CLI
"""

from typing import Optional

from rich.console import Console
from rich.live import Live
from rich.text import Text


class StatusDisplay:
    """Handle a single updating status line plus ordinary printed messages"""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console(stderr=True)
        self.live = None
        self.current_status = ""

    def start(self, initial_message: str = "Starting..."):
        """Start the status display"""
        self.current_status = initial_message
        self.live = Live(Text(initial_message, style="cyan"), console=self.console,
                         refresh_per_second=4, transient=True)
        self.live.start()

    def update(self, message: str, style: str = "cyan"):
        """Update the status message"""
        self.current_status = message
        if self.live:
            self.live.update(Text(message, style=style))

    def stop(self, final_message: Optional[str] = None):
        """Stop the status display"""
        if self.live:
            self.live.stop()
            self.live = None
        self.current_status = ""
        if final_message:
            self.console.print(final_message)

    def print(self, message: str, style: Optional[str] = None):
        """Print a message without disrupting status display"""
        self.console.print(message, style=style)
