from .ports import MailMessage, MailResult, MailSenderPort

__all__ = ["MailMessage", "MailResult", "MailSenderPort"]
