"""Delivery of password-recovery codes."""

import logging
from typing import Protocol

from investtrack.models.user import User

logger = logging.getLogger(__name__)


class PasswordResetNotifier(Protocol):
    """Sends password-recovery messages to a user"""

    def send_reset_code(self, user: User, code: str) -> None: ...

    def send_reset_confirmation(self, user: User) -> None: ...


class LoggingNotifier:
    """
    Default notifier: records in the application log that a message is due.

    The code itself is never logged, so this notifier cannot deliver it. Swap
    in a real mail-backed implementation through the `get_notifier` dependency.
    """

    def send_reset_code(self, user: User, code: str) -> None:
        logger.warning(
            "Password reset code issued for user %s <%s> but no mail delivery is configured",
            user.id,
            user.email,
        )

    def send_reset_confirmation(self, user: User) -> None:
        logger.info("Password reset confirmed for user %s <%s>", user.id, user.email)
