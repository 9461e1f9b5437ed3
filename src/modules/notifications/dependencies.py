from fastapi import Depends

from modules.notifications.services.email_service import EmailSender, SmtpEmailSender
from modules.notifications.services.notification_service import NotificationService


def get_email_sender() -> EmailSender:
    return SmtpEmailSender()


def get_notification_service(sender: EmailSender = Depends(get_email_sender)) -> NotificationService:
    return NotificationService(sender)
