import logging

import aiohttp

from .templates import OtpMessage
from ...exceptions import DeliveryError

logger = logging.getLogger(__name__)

BREVO_SEND_URL = "https://api.brevo.com/v3/smtp/email"


class BrevoEmailSender:
    """Transactional email through the Brevo HTTP API."""

    def __init__(self, api_key: str, from_address: str, from_name: str, timeout: int = 15,
                 url: str = BREVO_SEND_URL):
        self.api_key = api_key
        self.from_address = from_address
        self.from_name = from_name
        self.timeout = timeout
        self.url = url

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def send(self, to_email: str, message: OtpMessage) -> str:
        if not self.configured:
            logger.warning(f"[DEV MODE] Email to {to_email}: {message.text}")
            return "dev-mode"

        headers = {
            "api-key": self.api_key,
            "Content-Type": "application/json",
        }
        payload = {
            "sender": {"name": self.from_name, "email": self.from_address},
            "to": [{"email": to_email}],
            "subject": message.subject,
            "htmlContent": message.html,
            "textContent": message.text,
        }
        try:
            async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout)) as session:
                async with session.post(self.url, json=payload, headers=headers) as response:
                    result = await response.json(content_type=None)
                    if response.status != 201:
                        raise DeliveryError(f"Failed to send OTP via email to {to_email}", errors=[result])
        except aiohttp.ClientError as e:
            logger.error(f"Brevo error for {to_email}: {e}")
            raise DeliveryError(f"Failed to send OTP via email to {to_email}", cause=e) from e

        message_id = (result or {}).get("messageId", "unknown")
        logger.info(f"Email sent to {to_email}, message_id={message_id}")
        return message_id
