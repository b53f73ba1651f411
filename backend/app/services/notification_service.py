import logging
import smtplib
from email.message import EmailMessage

from app.config import settings
from app.schemas.entities import UserData

logger = logging.getLogger("app.mail")

# template id -> (subject, body)
TEMPLATES: dict[str, tuple[str, str]] = {
    "job_published": (
        'Your job "{job.title}" is live',
        "Hi {recipient.name},\n\n"
        'Your job posting "{job.title}" has been reviewed and published.\n'
        "It is now visible to writers on the marketplace.\n",
    ),
    "job_declined": (
        'Your job "{job.title}" was declined',
        "Hi {recipient.name},\n\n"
        'Your job posting "{job.title}" was not approved.\n\n'
        "Reason: {reason}\n\n"
        "You can edit the posting and submit it for review again.\n",
    ),
    "verify_email": (
        "Confirm your email address",
        "Hi {recipient.name},\n\n"
        "Use this code to confirm your email address:\n\n"
        "    {token}\n",
    ),
}


class MemoryBackend:
    """Keeps sent messages in an outbox instead of delivering them."""

    def __init__(self):
        self.outbox: list[EmailMessage] = []

    def send(self, message: EmailMessage):
        self.outbox.append(message)


class SmtpBackend:
    def send(self, message: EmailMessage):
        with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=10) as smtp:
            if settings.smtp_use_tls:
                smtp.starttls()
            if settings.smtp_username:
                smtp.login(settings.smtp_username, settings.smtp_password or "")
            smtp.send_message(message)


_memory_backend = MemoryBackend()


def _backend_from_settings():
    if settings.mail_backend == "memory":
        return _memory_backend
    if settings.mail_backend == "smtp":
        return SmtpBackend()
    raise ValueError(f"Unknown mail backend: {settings.mail_backend}")


class Notifier:
    def __init__(self, backend=None):
        self._backend = backend

    @property
    def backend(self):
        return self._backend or _backend_from_settings()

    def render(self, template: str, recipient: UserData, **payload) -> EmailMessage:
        if template not in TEMPLATES:
            raise KeyError(f"Unknown mail template: {template}")
        subject, body = TEMPLATES[template]
        context = {"recipient": recipient, **payload}

        message = EmailMessage()
        message["From"] = settings.mail_from
        message["To"] = recipient.email
        # Header values cannot carry line breaks from user-supplied titles
        message["Subject"] = " ".join(subject.format(**context).split())
        message["X-Template"] = template
        message.set_content(body.format(**context))
        return message

    def send(self, template: str, recipient: UserData, **payload):
        message = self.render(template, recipient, **payload)
        self.backend.send(message)
        logger.info("Sent %s mail to user %s", template, recipient.id)


notifier = Notifier()


def get_notifier() -> Notifier:
    return notifier
