from .email_service import SmtpEmailSender
from .notification_service import NotificationService

__all__ = ['SmtpEmailSender', 'NotificationService']
