"""
Email delivery of uptime reports over SMTP
"""

import asyncio
import smtplib
import ssl
from email.message import EmailMessage
from email.utils import format_datetime
from html import escape

import structlog

from uptime_report.core.errors import ConfigError, DeliveryError
from uptime_report.schemas.report import UptimeReport

logger = structlog.get_logger(__name__)


def render_report_html(report: UptimeReport) -> str:
    """Render the HTML body of the report email"""
    start = escape(report.window_start.strftime("%Y-%m-%d"))
    end = escape(report.window_end.strftime("%Y-%m-%d"))
    return f"""<!DOCTYPE html>
<html>
<head><title>Container Report</title></head>
<body>
    <h1>Container Uptime Report</h1>
    <p>{start} - {end}</p>
    <p>Total Containers: {report.total_count}</p>
    <p>Online Containers: {report.on_count}</p>
    <p>Offline Containers: {report.off_count}</p>
    <p>Total Uptime: {report.total_uptime_hours:.2f}h</p>
</body>
</html>"""


def report_subject(report: UptimeReport) -> str:
    return (
        "Container Management System Report from "
        f"{format_datetime(report.window_start)} to {format_datetime(report.window_end)}"
    )


class EmailReportSink:
    """Sends reports as HTML email through an authenticated SMTP relay"""

    def __init__(self, username: str, password: str,
                 host: str = "smtp.gmail.com", port: int = 587, timeout: float = 30.0):
        if not username:
            raise ConfigError("mail username is required for email delivery")
        self.username = username
        self.password = password
        self.host = host
        self.port = port
        self.timeout = timeout

    def build_message(self, report: UptimeReport, recipient: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.username
        message["To"] = recipient
        message["Subject"] = report_subject(report)
        message.set_content(
            f"Total: {report.total_count}, online: {report.on_count}, "
            f"offline: {report.off_count}, uptime: {report.total_uptime_hours:.2f}h"
        )
        message.add_alternative(render_report_html(report), subtype="html")
        return message

    def _send(self, message: EmailMessage):
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
            smtp.starttls(context=ssl.create_default_context())
            smtp.login(self.username, self.password)
            smtp.send_message(message)

    async def deliver(self, report: UptimeReport, recipient: str):
        """
        Email the report to recipient.

        Raises:
            DeliveryError: if the message could not be handed to the SMTP server
        """
        if not recipient:
            raise DeliveryError("no recipient configured for report email")

        message = self.build_message(report, recipient)
        try:
            await asyncio.to_thread(self._send, message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("failed to send email", email_to=recipient, error=str(e))
            raise DeliveryError(f"failed to send email: {e}") from e

        logger.info("report sent successfully", email_to=recipient, subject=message["Subject"])
