"""
Notification Service - transactional email via SendGrid.

Email is best effort: failures are logged and reported to the caller as
(False, reason), never raised.
"""
import html
from typing import Optional

import httpx

from smartbundle.core.config import settings
from smartbundle.core.logging import get_logger

logger = get_logger(__name__)

NOT_CONFIGURED = "Email service not configured"

SUPPORT_TEXT_TEMPLATE = """New Support Request from Alintro App

Shop: {shop}
User Email: {email}
Subject: {subject}

Message:
{message}

---
Sent from Alintro AI Upsell & Bundles App"""

SUPPORT_HTML_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
  <style>
    body {{ font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; line-height: 1.6; color: #333; }}
    .container {{ max-width: 600px; margin: 0 auto; padding: 20px; }}
    .header {{ background: #000; color: #fff; padding: 20px; text-align: center; }}
    .content {{ padding: 20px; background: #f9f9f9; }}
    .field {{ margin-bottom: 15px; }}
    .label {{ font-weight: bold; color: #666; }}
    .message {{ background: #fff; padding: 15px; border-left: 4px solid #000; margin-top: 15px; }}
    .footer {{ text-align: center; padding: 15px; color: #999; font-size: 12px; }}
  </style>
</head>
<body>
  <div class="container">
    <div class="header"><h2>New Support Request</h2></div>
    <div class="content">
      <div class="field"><span class="label">Shop:</span> {shop}</div>
      <div class="field"><span class="label">User Email:</span> {email}</div>
      <div class="field"><span class="label">Subject:</span> {subject}</div>
      <div class="message"><span class="label">Message:</span><br>{message}</div>
    </div>
    <div class="footer">Sent from Alintro AI Upsell &amp; Bundles App</div>
  </div>
</body>
</html>"""


class NotificationService:
    """
    Email sender over the SendGrid v3 mail API.

    Channels:
    - Email: support requests from merchants to the support inbox
    """

    SENDGRID_API_URL = "https://api.sendgrid.com/v3/mail/send"

    def __init__(
        self,
        api_key: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else settings.sendgrid_api_key
        self._transport = transport

    async def send_email(
        self,
        to: str,
        subject: str,
        text_content: str,
        html_content: Optional[str] = None,
    ) -> tuple[bool, Optional[str]]:
        """
        Send email via SendGrid.

        Args:
            to: Recipient email address
            subject: Email subject
            text_content: Plain text body
            html_content: Optional HTML body

        Returns:
            (success, error) tuple
        """
        if not self.api_key:
            logger.warning("SendGrid API key not configured, skipping email")
            return False, NOT_CONFIGURED

        content = [{"type": "text/plain", "value": text_content}]
        if html_content:
            content.append({"type": "text/html", "value": html_content})

        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.post(
                    self.SENDGRID_API_URL,
                    headers={
                        "Authorization": f"Bearer {self.api_key}",
                        "Content-Type": "application/json",
                    },
                    json={
                        "personalizations": [
                            {"to": [{"email": to}], "subject": subject},
                        ],
                        "from": {
                            "email": settings.support_email,
                            "name": settings.support_from_name,
                        },
                        "content": content,
                    },
                    timeout=10.0,
                )

                if response.is_success:
                    logger.info("Email sent", to=to, subject=subject)
                    return True, None

                logger.error(
                    "Email send failed",
                    status=response.status_code,
                    response=response.text,
                )
                return False, f"Failed to send email: {response.status_code}"

        except httpx.HTTPError as e:
            logger.error("Email send error", error=str(e))
            return False, str(e)

    async def send_support_email(
        self,
        shop: str,
        email: str,
        subject: str,
        message: str,
    ) -> tuple[bool, Optional[str]]:
        """Forward a merchant's support request to the support inbox."""
        text_content = SUPPORT_TEXT_TEMPLATE.format(
            shop=shop,
            email=email,
            subject=subject,
            message=message,
        )
        html_content = SUPPORT_HTML_TEMPLATE.format(
            shop=html.escape(shop),
            email=html.escape(email),
            subject=html.escape(subject),
            message=html.escape(message).replace("\n", "<br>"),
        )
        return await self.send_email(
            to=settings.support_email,
            subject=f"[Alintro Support] {subject}",
            text_content=text_content,
            html_content=html_content,
        )
