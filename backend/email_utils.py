import smtplib
from email.message import EmailMessage
from typing import Optional

from config import get_settings


def send_otp_email(recipient: str, otp: str, procedure: str, first_name: Optional[str] = None) -> None:
    settings = get_settings()
    host = settings.smtp_host
    port = settings.smtp_port
    user = settings.smtp_user
    password = settings.smtp_pass
    sender = settings.smtp_from or user

    if not host or not sender:
        raise RuntimeError("SMTP is not configured (SMTP_HOST/SMTP_FROM/SMTP_USER)")

    greeting = f"Hi {first_name}," if first_name else "Hi,"

    msg = EmailMessage()
    msg["Subject"] = "Password Reset OTP" if procedure == "reset password" else "Email Verification OTP"
    msg["From"] = sender
    msg["To"] = recipient
    msg.set_content(
        f"{greeting}\n\n"
        f"your one-time code to {procedure} is:\n"
        f"{otp}\n\n"
        f"The code expires in {settings.otp_expiration_seconds // 60} minutes.\n"
        "If you did not ask for it, ignore this email.\n"
    )

    with smtplib.SMTP(host, port, timeout=20) as server:
        server.ehlo()
        if port == 587:
            server.starttls()
        if user and password:
            server.login(user, password)
        server.send_message(msg)
