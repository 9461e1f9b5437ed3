# modules/notifications/services/email_service.py
import html
import io
import smtplib
from email.message import EmailMessage
from typing import List, Optional, Protocol, Tuple

import qrcode

from core.config import settings
from core.logging import get_logger

logger = get_logger(__name__)

# (filename, content-id, png bytes)
InlineImage = Tuple[str, str, bytes]


class EmailTemplate:
    def __init__(self, to: str, subject: str, html: str, text: str, images: Optional[List[InlineImage]] = None):
        self.to = to
        self.subject = subject
        self.html = html
        self.text = text
        self.images = images or []

    def to_dict(self):
        return {
            'to': self.to,
            'subject': self.subject,
            'html': self.html,
            'text': self.text,
        }


class ContractInvitationEmail(EmailTemplate):
    def __init__(self, to: str, contract_name: str, inviter_name: str, temporary_password: str,
                 frontend_url: str = settings.FRONTEND_URL):
        login_url = f"{frontend_url.rstrip('/')}/login"
        subject = f"You've been invited to sign a contract: {contract_name}"
        safe_name = html.escape(contract_name)
        safe_inviter = html.escape(inviter_name)
        safe_url = html.escape(login_url)
        body = f"""
            <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
                <h2 style="color: #333;">Contract Invitation</h2>
                <p>Hello,</p>
                <p><strong>{safe_inviter}</strong> has invited you to sign a contract titled
                   "<strong>{safe_name}</strong>".</p>
                <p>An account has been created for you. Sign in with this email address and the
                   temporary password below, then bind your wallet to start signing:</p>
                <p style="font-size: 18px; text-align: center;"><code>{temporary_password}</code></p>
                <div style="text-align: center; margin: 30px 0;">
                    <a href="{safe_url}"
                       style="background-color: #007bff; color: white; padding: 12px 24px;
                              text-decoration: none; border-radius: 5px; display: inline-block;">
                        Sign in & View Contract
                    </a>
                </div>
                <p style="color: #666; font-size: 14px;">
                    If the button doesn't work, open this link in your browser:<br>
                    <a href="{safe_url}">{safe_url}</a>
                </p>
                <p style="color: #666; font-size: 12px;">Please change your password after signing in.</p>
            </div>
        """
        text = (
            f"You've been invited to sign a contract: {contract_name}\n\n"
            f"{inviter_name} has invited you to sign a contract. Sign in at {login_url}\n"
            f"with this email address and the temporary password: {temporary_password}\n\n"
            "Please change your password after signing in.\n"
        )
        super().__init__(to, subject, body, text)


class SignatureReceiptEmail(EmailTemplate):
    """Receipt sent to a signer, with a QR code pointing at the anchor page."""

    def __init__(self, to: str, contract_name: str, transaction_hash: str,
                 frontend_url: str = settings.FRONTEND_URL):
        verify_url = f"{frontend_url.rstrip('/')}/contracts/transaction/{transaction_hash}"
        subject = f"Signature recorded: {contract_name}"
        safe_name = html.escape(contract_name)
        safe_hash = html.escape(transaction_hash)
        safe_url = html.escape(verify_url)
        body = f"""
            <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
                <h2 style="color: #333;">Signature recorded</h2>
                <p>Your signature on "<strong>{safe_name}</strong>" was recorded with
                   transaction <code>{safe_hash}</code>.</p>
                <p>Scan the code to review the contract:</p>
                <div style="text-align: center;"><img src="cid:signature-qr" alt="QR code"></div>
                <p style="color: #666; font-size: 14px;"><a href="{safe_url}">{safe_url}</a></p>
            </div>
        """
        text = (
            f"Your signature on {contract_name} was recorded with transaction {transaction_hash}.\n"
            f"Review it at {verify_url}\n"
        )
        images = [("signature-qr.png", "signature-qr", render_qr_png(verify_url))]
        super().__init__(to, subject, body, text, images)


def render_qr_png(data: str) -> bytes:
    buffer = io.BytesIO()
    qrcode.make(data).save(buffer, format="PNG")
    return buffer.getvalue()


class EmailSender(Protocol):
    def send(self, email: EmailTemplate) -> bool:
        ...


class SmtpEmailSender:
    """Delivers templated emails over SMTP."""

    def __init__(
        self,
        host: str = settings.SMTP_HOST,
        port: int = settings.SMTP_PORT,
        user: Optional[str] = settings.SMTP_USER,
        password: Optional[str] = settings.SMTP_PASSWORD,
        sender: Optional[str] = settings.mail_from,
        use_tls: bool = settings.SMTP_USE_TLS,
        timeout: int = settings.SMTP_TIMEOUT,
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.sender = sender
        self.use_tls = use_tls
        self.timeout = timeout

    def build_message(self, email: EmailTemplate) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.sender or ""
        message["To"] = email.to
        message["Subject"] = email.subject
        message.set_content(email.text)
        message.add_alternative(email.html, subtype="html")

        html_part = message.get_payload()[-1]
        for filename, cid, data in email.images:
            html_part.add_related(data, maintype="image", subtype="png", cid=f"<{cid}>", filename=filename)
        return message

    def send(self, email: EmailTemplate) -> bool:
        """Returns False on delivery failure; the failure is logged, not raised."""
        message = self.build_message(email)
        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
                if self.use_tls:
                    smtp.starttls()
                if self.user and self.password:
                    smtp.login(self.user, self.password)
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError):
            logger.exception("Failed to send email", extra={"email": email.to})
            return False

        logger.info(f"Email sent: {email.subject}", extra={"email": email.to})
        return True
