"""Single-operator access control.

One identity, the operator, may mutate gateway state. The gateway calls
``guard`` as the first step of every privileged operation.
"""

from __future__ import annotations

import logging
import threading

from .exceptions import Unauthorized
from .identity import validate_identity

logger = logging.getLogger(__name__)


class AccessControl:
    """Holds the operator identity and gates privileged calls.

    Reassigning the operator to an identity nobody controls permanently
    locks out every privileged operation. Only representability is
    checked.
    """

    def __init__(self, operator: str) -> None:
        self._operator = validate_identity(operator)
        self._lock = threading.RLock()

    def current_operator(self) -> str:
        """Get the identity currently allowed to mutate state."""
        return self._operator

    def check(self, caller: str) -> bool:
        """Return True if the caller is the operator."""
        return caller == self._operator

    def guard(self, caller: str) -> None:
        """Reject callers other than the operator.

        Raises:
            Unauthorized: If caller is not the current operator
        """
        if not self.check(caller):
            logger.warning(f"Rejected privileged call from {caller!r}")
            raise Unauthorized(
                "Caller is not the operator",
                {"caller": caller},
            )

    def transfer_operator(self, caller: str, new_operator: str) -> str:
        """Hand operator rights to a new identity.

        Args:
            caller: Identity making the call
            new_operator: Identity that becomes the operator

        Returns:
            The previous operator

        Raises:
            Unauthorized: If caller is not the current operator
            InvalidIdentityError: If new_operator is not a valid identity
        """
        with self._lock:
            self.guard(caller)
            validate_identity(new_operator)
            previous = self._operator
            self._operator = new_operator

        logger.info(f"Operator transferred from {previous} to {new_operator}")
        return previous
