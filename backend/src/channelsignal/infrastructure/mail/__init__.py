from .resend_sender import ResendMailSender

__all__ = ["ResendMailSender"]
