# portal/lambdas/thoughts_api/notifier.py
import logging

import boto3

logger = logging.getLogger(__name__)


def format_notification(thought):
    subject = f"New thought ({thought.get('category', 'general')})"
    body = (
        f"Category: {thought.get('category', 'general')}\n"
        f"Time: {thought.get('timestamp', '')}\n"
        "\n"
        f"{thought.get('content', '')}\n"
    )
    return subject, body


class NullNotifier:
    def notify(self, thought):
        logger.info("Notifications disabled; skipping email for %s", thought.get("id"))


class SesNotifier:
    """
    Best-effort email via Amazon SES.
    Failures are logged and never raised to the caller.
    """

    def __init__(self, client, sender, recipient):
        self.client = client
        self.sender = sender
        self.recipient = recipient

    @classmethod
    def from_settings(cls, settings):
        return cls(
            boto3.client("ses", region_name=settings.aws_region),
            settings.notify_from,
            settings.notify_to,
        )

    def notify(self, thought):
        subject, body = format_notification(thought)
        try:
            self.client.send_email(
                Source=self.sender,
                Destination={"ToAddresses": [self.recipient]},
                Message={
                    "Subject": {"Data": subject, "Charset": "UTF-8"},
                    "Body": {"Text": {"Data": body, "Charset": "UTF-8"}},
                },
            )
            logger.info("Notification sent for %s", thought.get("id"))
        except Exception:
            logger.exception("Notification failed for %s", thought.get("id"))


def build_notifier(settings):
    if settings.notifications_enabled:
        return SesNotifier.from_settings(settings)
    return NullNotifier()
