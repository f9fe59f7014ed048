from dataclasses import dataclass


@dataclass(frozen=True)
class EmailMessage:
    """Transactional email handed to a Notifier."""
    to: str
    subject: str
    html: str
