"""HTML bodies for the transactional emails sent by the auth flow."""

from html import escape

from domain.model.notification import EmailMessage


def password_reset_email(to: str, reset_url: str) -> EmailMessage:
    url = escape(reset_url, quote=True)
    return EmailMessage(
        to=to,
        subject="Password Reset Request",
        html=(
            f"Please click the following link: <a href='{url}' target=\"_blank\"> {url} </a> "
            "to reset your password.<br><br>"
            "If you did not request this, please ignore this email and your password "
            "will remain unchanged."
        ),
    )


def password_changed_email(to: str, name: str) -> EmailMessage:
    return EmailMessage(
        to=to,
        subject="Your password has been changed",
        html=(
            f"Hi {escape(name)}<br>"
            f"This is a confirmation that the password for your account {escape(to)} "
            "has just been changed.<br>"
        ),
    )


def verification_email(to: str, verify_url: str) -> EmailMessage:
    url = escape(verify_url, quote=True)
    return EmailMessage(
        to=to,
        subject="Account Verification Token",
        html=(
            f"Please verify your account by clicking the following link: "
            f"<a href='{url}' target=\"_blank\"> {url} </a><br><br>"
            "If you did not create this account, please ignore this email."
        ),
    )
