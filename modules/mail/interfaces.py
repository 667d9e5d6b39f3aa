"""
Mail module interface.

The users module only knows IMailer; tests swap in an AsyncMock.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class IMailer(Protocol):
    """Transactional emails sent by the account workflow."""

    async def send_verification_email(self, email: str, token: str) -> None:
        """Send the link that verifies ``email``."""
        ...

    async def send_password_reset_email(self, email: str, token: str) -> None:
        """Send the link that lets the owner of ``email`` pick a new password."""
        ...

    async def send_password_changed_email(self, email: str) -> None:
        """Tell the owner of ``email`` that their password was changed."""
        ...
