from ...application.ports.notifier import ContactNotifier
from .brevo_email import BrevoEmailSender
from .templates import otp_email_message, otp_sms_body
from .twilio_sms import TwilioSmsSender


class NotificationService(ContactNotifier):
    """Delivers OTP codes by email (Brevo) or SMS (Twilio)."""

    def __init__(self, sms: TwilioSmsSender, email: BrevoEmailSender, sender_name: str = "Salus",
                 otp_ttl_seconds: int = 300):
        self.sms = sms
        self.email = email
        self.sender_name = sender_name
        self.ttl_minutes = max(1, otp_ttl_seconds // 60)

    async def send_email(self, address: str, code: str) -> str:
        return await self.email.send(address, otp_email_message(code, self.sender_name, self.ttl_minutes))

    async def send_sms(self, number: str, code: str) -> str:
        return await self.sms.send(number, otp_sms_body(code, self.sender_name, self.ttl_minutes))
