"""User-visible notifications emitted by mutations."""

from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol

from rich.console import Console
from rich.markup import escape


class NotificationLevel(StrEnum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


@dataclass(frozen=True)
class Notification:
    level: NotificationLevel
    message: str


class Notifier(Protocol):
    def notify(self, notification: Notification) -> None: ...


class ConsoleNotifier:
    """Prints notifications to a Rich console."""

    STYLES = {
        NotificationLevel.SUCCESS: "[green]✓ {message}[/green]",
        NotificationLevel.ERROR: "[red]✗ {message}[/red]",
        NotificationLevel.INFO: "[blue]{message}[/blue]",
    }

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def notify(self, notification: Notification) -> None:
        self.console.print(self.STYLES[notification.level].format(message=escape(notification.message)))


class NotificationLog:
    """Collects notifications in memory."""

    def __init__(self) -> None:
        self.items: list[Notification] = []

    def notify(self, notification: Notification) -> None:
        self.items.append(notification)

    @property
    def last(self) -> Notification | None:
        return self.items[-1] if self.items else None

    def messages(self, level: NotificationLevel | None = None) -> list[str]:
        return [n.message for n in self.items if level is None or n.level is level]
