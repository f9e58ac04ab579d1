import logging
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Sequence

import aiosmtplib

from ..core.config import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InlineAttachment:
    """Binary part shown inside the HTML body via ``cid:<cid>``."""

    filename: str
    content: bytes
    cid: str
    maintype: str = "image"
    subtype: str = "png"


def build_message(
    sender: str,
    recipient: str,
    subject: str,
    html: str,
    attachments: Sequence[InlineAttachment] = (),
) -> EmailMessage:
    msg = EmailMessage()
    msg["From"] = sender
    msg["To"] = recipient
    msg["Subject"] = subject
    msg.set_content("Your ticket is attached. Please view this email in an HTML capable client.")
    msg.add_alternative(html, subtype="html")
    html_part = msg.get_body(preferencelist=("html",))
    for att in attachments:
        html_part.add_related(
            att.content,
            maintype=att.maintype,
            subtype=att.subtype,
            cid=f"<{att.cid}>",
            filename=att.filename,
            disposition="inline",
        )
    return msg


class SmtpMailer:
    """Sends HTML mail with inline attachments over SMTP."""

    def __init__(self, settings: Settings):
        self.host = settings.SMTP_HOST
        self.port = settings.SMTP_PORT
        self.username = settings.SMTP_USERNAME
        self.password = settings.SMTP_PASSWORD
        self.sender = settings.SMTP_FROM

    async def send_email(
        self,
        recipient: str,
        subject: str,
        html: str,
        attachments: Sequence[InlineAttachment] = (),
    ) -> None:
        """Send one message; SMTP errors propagate to the caller."""
        msg = build_message(self.sender, recipient, subject, html, attachments)
        await aiosmtplib.send(
            msg,
            hostname=self.host,
            port=self.port,
            username=self.username or None,
            password=self.password or None,
            start_tls=bool(self.username),
        )
        logger.info("Sent email to %s", recipient)
