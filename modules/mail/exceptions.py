"""
Mail module exceptions.
"""

from shared.exceptions import ExternalServiceError


class MailDeliveryError(ExternalServiceError):
    """Raised when the SMTP server refuses or drops a message."""

    def __init__(self, recipient: str, reason: str):
        super().__init__(
            f"Could not send email: {reason}",
            service="smtp",
            code="MAIL_DELIVERY_FAILED",
            details={"recipient": recipient},
        )
