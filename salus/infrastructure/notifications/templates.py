from dataclasses import dataclass


@dataclass(frozen=True)
class OtpMessage:
    subject: str
    text: str
    html: str


def otp_email_message(code: str, sender_name: str, ttl_minutes: int) -> OtpMessage:
    text = f"""Hello,

Your OTP for verification is: {code}

This code expires in {ttl_minutes} minutes.
This is an auto-generated email. Please do not reply to this email.

Regards,
{sender_name}"""
    html = f"""<!DOCTYPE html>
<html>
<body style="font-family: Arial, sans-serif; color: #333;">
  <p>Hello,</p>
  <p>Your OTP for verification is:</p>
  <p style="font-size: 28px; font-weight: bold; letter-spacing: 5px;">{code}</p>
  <p>This code expires in {ttl_minutes} minutes.</p>
  <p style="color: #888; font-size: 12px;">This is an auto-generated email. Please do not reply to this email.</p>
  <p>{sender_name}</p>
</body>
</html>"""
    return OtpMessage(subject="Your OTP Code for Verification", text=text, html=html)


def otp_sms_body(code: str, sender_name: str, ttl_minutes: int) -> str:
    return f"{sender_name}: your OTP for verification is {code}. It expires in {ttl_minutes} minutes. Do not share it."
