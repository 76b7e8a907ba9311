"""
Notification channel that prints conflict findings to the terminal.
"""

from typing import Optional, Sequence

from rich.console import Console

from ..domain.models import AppointmentCandidate, ConflictFinding, ConflictKind

KIND_STYLES = {
    ConflictKind.OUTSIDE_HOURS: "yellow",
    ConflictKind.OVERLAP: "red",
    ConflictKind.DOUBLE_BOOKING: "bold red",
}


class ConsoleNotificationChannel:
    """Displays findings; nothing is fed back into the scheduling rules."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def notify(self, candidate: AppointmentCandidate, findings: Sequence[ConflictFinding]) -> None:
        self.console.print(f"[bold]⚠ {candidate}[/bold]")
        for finding in findings:
            style = KIND_STYLES[finding.kind]
            self.console.print(f"  [{style}]{finding.kind.value}[/{style}] {finding.message}")
