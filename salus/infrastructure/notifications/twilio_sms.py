import logging
from typing import Optional

from starlette.concurrency import run_in_threadpool
from twilio.base.exceptions import TwilioException
from twilio.http.http_client import TwilioHttpClient
from twilio.rest import Client

from ...exceptions import DeliveryError

logger = logging.getLogger(__name__)


class TwilioSmsSender:
    """Sends text messages from a Twilio number.

    Without credentials the sender runs in development mode and logs the
    message instead of sending it.
    """

    def __init__(self, account_sid: str, auth_token: str, from_number: str,
                 client: Optional[Client] = None, timeout: int = 15):
        self.from_number = from_number
        self.client = client
        if self.client is None and account_sid and auth_token:
            self.client = Client(account_sid, auth_token, http_client=TwilioHttpClient(timeout=timeout))

    @property
    def configured(self) -> bool:
        return self.client is not None and bool(self.from_number)

    async def send(self, to_number: str, body: str) -> str:
        if not self.configured:
            logger.warning(f"[DEV MODE] SMS to {to_number}: {body}")
            return "dev-mode"
        try:
            # The Twilio client is blocking; keep it off the event loop.
            message = await run_in_threadpool(
                self.client.messages.create, body=body, from_=self.from_number, to=to_number
            )
        except TwilioException as e:
            logger.error(f"Twilio error: {e}")
            raise DeliveryError(f"Failed to send OTP via SMS to {to_number}", cause=e) from e
        logger.info(f"SMS sent to {to_number}, SID: {message.sid}")
        return message.sid
