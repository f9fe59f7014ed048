"""Port definition for transactional email delivery."""

from typing import Protocol

from domain.model.notification import EmailMessage


class Notifier(Protocol):
    def send(self, message: EmailMessage) -> None:
        """Deliver `message`. Raise DeliveryError if the relay rejects it or is unreachable."""
        ...
