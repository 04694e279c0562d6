"""Funds transfer service.

The gateway never moves money itself; it asks a ``FundsTransfer`` service
to pay a destination. ``Ledger`` is the in-memory implementation used for
local runs and tests.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Protocol, runtime_checkable

from .fees import validate_amount
from .identity import validate_identity

logger = logging.getLogger(__name__)

ReceiveHook = Callable[[str, int], None]


@runtime_checkable
class FundsTransfer(Protocol):
    """Atomic transfer of funds to a destination identity."""

    def transfer(self, destination: str, amount: int) -> None:
        """Pay ``amount`` to ``destination``. Raises if the destination refuses."""
        ...


class Ledger:
    """In-memory balances keyed by identity.

    A destination may register receive hooks. Hooks run on every incoming
    transfer before the balance is credited; a hook that raises refuses the
    funds and the ledger is left unchanged. Hooks may call back into the
    gateway that initiated the transfer.
    """

    def __init__(self) -> None:
        self._balances: dict[str, int] = {}
        self._hooks: dict[str, list[ReceiveHook]] = {}
        self._lock = threading.RLock()

    def balance_of(self, identity: str) -> int:
        """Get the balance held by an identity."""
        with self._lock:
            return self._balances.get(identity, 0)

    def credit(self, identity: str, amount: int) -> None:
        """Add funds to an identity without running hooks."""
        validate_identity(identity)
        validate_amount(amount)
        with self._lock:
            self._balances[identity] = self._balances.get(identity, 0) + amount

    def on_receive(self, destination: str, hook: ReceiveHook) -> None:
        """Register a hook called as ``hook(destination, amount)`` on receipt."""
        with self._lock:
            self._hooks.setdefault(destination, []).append(hook)

    def transfer(self, destination: str, amount: int) -> None:
        """Pay funds into a destination.

        Raises:
            Exception: Whatever a receive hook raises to refuse the funds
        """
        validate_identity(destination)
        validate_amount(amount)
        with self._lock:
            hooks = list(self._hooks.get(destination, []))

        for hook in hooks:
            hook(destination, amount)

        with self._lock:
            self._balances[destination] = self._balances.get(destination, 0) + amount

        logger.debug(f"Ledger credited {amount} to {destination}")

    def total_supply(self) -> int:
        """Sum of all balances."""
        with self._lock:
            return sum(self._balances.values())
