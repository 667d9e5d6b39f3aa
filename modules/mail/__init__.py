"""
Mail module.

Sends the account workflow's transactional emails (verification, password
reset, password changed).
"""

from .interfaces import IMailer
from .service import SmtpMailer
from .exceptions import MailDeliveryError

__all__ = ["IMailer", "SmtpMailer", "MailDeliveryError"]
