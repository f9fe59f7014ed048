"""In-memory implementation of Notifier for testing."""

from domain.model.errors import DeliveryError
from domain.model.notification import EmailMessage


class FakeNotifier:
    def __init__(self, fail: bool = False):
        self.sent: list[EmailMessage] = []
        self.fail = fail

    def send(self, message: EmailMessage) -> None:
        if self.fail:
            raise DeliveryError(f"Could not deliver email to {message.to}")
        self.sent.append(message)

    def last_to(self, recipient: str) -> EmailMessage | None:
        for message in reversed(self.sent):
            if message.to == recipient:
                return message
        return None
