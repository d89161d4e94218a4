"""Toast/banner sink shared by the admin views."""

from collections import deque
from dataclasses import dataclass
from typing import Deque, Optional

import structlog

logger = structlog.get_logger(__name__)

VARIANTS = ("default", "success", "destructive")

# older notifications are dropped once the history is full
MAX_NOTIFICATIONS = 50


@dataclass
class Notification:
    """A single user-facing message."""

    title: str
    description: str
    variant: str = "default"

    def __post_init__(self):
        if self.variant not in VARIANTS:
            raise ValueError(f"Invalid variant: {self.variant}")


class Notifier:
    """Keeps the most recent notifications in display order and mirrors them to the log."""

    def __init__(self, limit: int = MAX_NOTIFICATIONS):
        self.notifications: Deque[Notification] = deque(maxlen=limit)

    def notify(self, title: str, description: str, variant: str = "default") -> Notification:
        notification = Notification(title=title, description=description, variant=variant)
        self.notifications.append(notification)

        log = logger.warning if variant == "destructive" else logger.info
        log("notification", title=title, description=description, variant=variant)
        return notification

    def success(self, description: str, title: str = "Success") -> Notification:
        return self.notify(title, description, variant="success")

    def error(self, description: str, title: str = "Error") -> Notification:
        return self.notify(title, description, variant="destructive")

    @property
    def latest(self) -> Optional[Notification]:
        return self.notifications[-1] if self.notifications else None

    def clear(self) -> None:
        self.notifications.clear()
