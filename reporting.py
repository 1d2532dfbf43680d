# reporting.py
from typing import Optional

from rich.console import Console


class StatusReporter:
    """Writes progress lines to stderr, keeping stdout free for results."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console(stderr=True, highlight=False)

    def step(self, message: str):
        self.console.print(f"{message} ... ", end="", markup=False)

    def success(self):
        self.console.print("success", style="green")

    def fail(self):
        self.console.print("fail", style="red")
        self.console.print()

    def blank(self):
        self.console.print()

    def summary(self, count: int, elapsed: float):
        self.console.print(
            f" Collection complete: Discovered {count} pingable addresses in {elapsed:.3f} seconds"
        )
