"""Arbitration Gateway for question/answer oracles.

Sits in front of an oracle as the arbitrator named on its questions:

- Dispute fees: a default fee plus per-question overrides
- Paid arbitration requests that freeze a question on the oracle
- Forwarding of the operator's arbitrated answers to the oracle
- Custody of collected fees until the operator withdraws them

Every privileged operation passes AccessControl.guard first. A failed
call leaves fees, escrow, metadata and operator exactly as they were:
outward calls are made before local state is committed, and withdrawal
clears the balance before paying out and restores it if the payout is
refused.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar

from .access import AccessControl
from .config import GatewayConfigProtocol, get_config, get_gateway_config_or_none
from .events import (
    ArbitrationRequested,
    CustomFeeChanged,
    DefaultFeeChanged,
    EventBus,
    FundsWithdrawn,
    GatewayEvent,
    MetadataChanged,
    OperatorTransferred,
    OracleFundsPulled,
    QuestionFeeConfigured,
)
from .exceptions import (
    FeeNotConfigured,
    InsufficientPayment,
    OracleCallFailed,
    TransferFailed,
)
from .fees import DisputeFeeSchedule, validate_amount
from .identity import validate_identity
from .ledger import FundsTransfer
from .oracle import Oracle

logger = logging.getLogger(__name__)

T = TypeVar("T")


# =============================================================================
# STATE SNAPSHOT
# =============================================================================


@dataclass
class GatewayState:
    """Point-in-time view of the gateway's mutable state."""

    operator: str
    escrow_balance: int = 0
    fees: DisputeFeeSchedule = field(default_factory=DisputeFeeSchedule)
    metadata: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "operator": self.operator,
            "escrow_balance": self.escrow_balance,
            "fees": self.fees.to_dict(),
            "metadata": self.metadata,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GatewayState:
        """Create from dictionary."""
        return cls(
            operator=data["operator"],
            escrow_balance=validate_amount(data.get("escrow_balance", 0), "escrow_balance"),
            fees=DisputeFeeSchedule.from_dict(data.get("fees", {})),
            metadata=data.get("metadata", ""),
        )


def _oracle_name(oracle: Oracle) -> str:
    return getattr(oracle, "identity", None) or type(oracle).__name__


# =============================================================================
# GATEWAY
# =============================================================================


class ArbitrationGateway:
    """Fee-gated arbitration front end for an oracle.

    All public operations are serialized by one re-entrant lock. A call
    made back into the gateway from an oracle or payout destination runs on
    the same thread and sees the state as committed so far. Signals are
    published before the lock is released, so their order matches the
    order in which changes were committed.
    """

    def __init__(
        self,
        identity: str,
        access: AccessControl,
        transfer: FundsTransfer,
        events: EventBus | None = None,
        default_fee: int = 0,
        metadata: str = "",
    ) -> None:
        """Initialize the gateway.

        Args:
            identity: The gateway's own identity, presented to oracles as caller
            access: Access control holding the operator
            transfer: Service used to pay out withdrawals
            events: Bus receiving signals (a private bus if omitted)
            default_fee: Initial default dispute fee
            metadata: Initial terms-of-service string
        """
        self.identity = validate_identity(identity)
        self.access = access
        self.transfer = transfer
        self.events = events or EventBus()

        self._fees = DisputeFeeSchedule(default_fee=validate_amount(default_fee, "default_fee"))
        self._escrow_balance = 0
        self._metadata = metadata
        self._lock = threading.RLock()

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def escrow_balance(self) -> int:
        """Funds held pending withdrawal."""
        with self._lock:
            return self._escrow_balance

    @property
    def default_fee(self) -> int:
        with self._lock:
            return self._fees.default_fee

    @property
    def metadata(self) -> str:
        with self._lock:
            return self._metadata

    def custom_fee(self, question_id: str) -> int:
        """Get the stored override for a question (0 if none)."""
        with self._lock:
            return self._fees.custom_fees.get(question_id, 0)

    def effective_fee(self, question_id: str) -> int:
        """Get the fee required to request arbitration of a question.

        The custom fee wins only when strictly positive; otherwise the
        default applies.
        """
        with self._lock:
            fee = self._fees.effective_fee(question_id)
        logger.debug(f"Effective fee for {question_id} is {fee}")
        return fee

    # Name used by oracle front ends
    get_dispute_fee = effective_fee

    def snapshot(self) -> GatewayState:
        """Copy of the current state."""
        with self._lock:
            return GatewayState(
                operator=self.access.current_operator(),
                escrow_balance=self._escrow_balance,
                fees=DisputeFeeSchedule.from_dict(self._fees.to_dict()),
                metadata=self._metadata,
            )

    # -------------------------------------------------------------------------
    # Operator configuration
    # -------------------------------------------------------------------------

    def transfer_operator(self, caller: str, new_operator: str) -> None:
        """Hand operator rights to a new identity."""
        with self._lock:
            previous = self.access.transfer_operator(caller, new_operator)
            self._emit(OperatorTransferred(previous=previous, current=new_operator))

    def set_default_fee(self, caller: str, fee: int) -> None:
        """Set the fee used for questions without a positive override.

        Zero is allowed and disables arbitration for those questions.
        """
        with self._lock:
            self.access.guard(caller)
            self._fees.set_default_fee(fee)
            logger.info(f"Default dispute fee set to {fee}")
            self._emit(DefaultFeeChanged(fee=fee))

    def set_custom_fee(self, caller: str, question_id: str, fee: int) -> None:
        """Set the dispute fee override for one question."""
        with self._lock:
            self.access.guard(caller)
            self._fees.set_custom_fee(question_id, fee)
            logger.info(f"Custom dispute fee for {question_id} set to {fee}")
            self._emit(CustomFeeChanged(question_id=question_id, fee=fee))

    def set_metadata(self, caller: str, metadata: str) -> None:
        """Publish the arbitrator's terms of service."""
        with self._lock:
            self.access.guard(caller)
            if not isinstance(metadata, str):
                raise TypeError("metadata must be a string")
            self._metadata = metadata
            logger.info("Arbitrator metadata updated")
            self._emit(MetadataChanged(metadata=metadata))

    def configure_oracle_question_fee(self, caller: str, oracle: Oracle, fee: int) -> None:
        """Set the fee an oracle charges to ask questions naming this arbitrator.

        Raises:
            Unauthorized: If caller is not the operator
            OracleCallFailed: If the oracle rejects the directive
        """
        with self._lock:
            self.access.guard(caller)
            validate_amount(fee, "fee")
            self._call_oracle("set_question_fee", oracle.set_question_fee, self.identity, fee)
            logger.info(f"Question fee on {_oracle_name(oracle)} set to {fee}")
            self._emit(QuestionFeeConfigured(oracle=_oracle_name(oracle), fee=fee))

    # -------------------------------------------------------------------------
    # Arbitration requests
    # -------------------------------------------------------------------------

    def request_arbitration(
        self,
        requester: str,
        oracle: Oracle,
        question_id: str,
        payment: int,
        max_previous: int = 0,
    ) -> None:
        """Pay to have a question frozen pending arbitration.

        Anyone may call this. Overpayment is kept; no change is returned.
        The payment is taken only if the oracle accepts the notification.

        Args:
            requester: Identity paying for arbitration
            oracle: Oracle holding the question
            question_id: Question to arbitrate
            payment: Amount attached to the request
            max_previous: Highest current bond the requester accepts (0 = any)

        Raises:
            FeeNotConfigured: If the effective fee is zero
            InsufficientPayment: If payment is below the effective fee
            OracleCallFailed: If the oracle refuses to freeze the question
        """
        validate_identity(requester)
        validate_amount(payment, "payment")
        validate_amount(max_previous, "max_previous")

        with self._lock:
            fee = self._fees.effective_fee(question_id)
            if fee == 0:
                logger.warning(f"Arbitration refused for {question_id}: no fee configured")
                raise FeeNotConfigured(
                    "Arbitration is not offered for this question",
                    {"question_id": question_id},
                )
            if payment < fee:
                logger.warning(f"Arbitration refused for {question_id}: paid {payment}, fee is {fee}")
                raise InsufficientPayment(
                    f"Payment of {payment} is below the dispute fee of {fee}",
                    {"question_id": question_id, "fee": fee, "payment": payment},
                )

            self._call_oracle(
                "notify_of_arbitration_request",
                oracle.notify_of_arbitration_request,
                self.identity,
                question_id,
                requester,
                max_previous,
            )
            self._escrow_balance += payment
            logger.info(f"Arbitration requested for {question_id} by {requester}, paid {payment}")
            self._emit(ArbitrationRequested(question_id=question_id, amount=payment, requester=requester, remaining=0))

    # -------------------------------------------------------------------------
    # Arbitrated answers
    # -------------------------------------------------------------------------

    def submit_arbitrated_answer(
        self,
        caller: str,
        oracle: Oracle,
        question_id: str,
        answer: bytes,
        answerer: str,
    ) -> None:
        """Forward the arbitrator's final answer to the oracle.

        ``answerer`` is credited by the oracle: the last answerer if the
        answer stands, otherwise whoever paid for arbitration. Choosing it
        is the operator's decision.
        """
        with self._lock:
            self.access.guard(caller)
            validate_identity(answerer)
            self._call_oracle(
                "submit_answer_by_arbitrator",
                oracle.submit_answer_by_arbitrator,
                self.identity,
                question_id,
                answer,
                answerer,
            )
        logger.info(f"Arbitrated answer submitted for {question_id}, credited to {answerer}")

    def assign_winner_and_submit_answer(
        self,
        caller: str,
        oracle: Oracle,
        question_id: str,
        answer: bytes,
        payee_if_wrong: str,
        last_history_hash: bytes,
        last_answer_or_commitment_id: bytes,
        last_answerer: str,
    ) -> None:
        """Forward an arbitrated answer, letting the oracle pick the payee.

        The oracle checks the supplied last history entry and credits the
        last answerer if they were right, otherwise ``payee_if_wrong``.
        """
        with self._lock:
            self.access.guard(caller)
            validate_identity(payee_if_wrong)
            self._call_oracle(
                "assign_winner_and_submit_answer_by_arbitrator",
                oracle.assign_winner_and_submit_answer_by_arbitrator,
                self.identity,
                question_id,
                answer,
                payee_if_wrong,
                last_history_hash,
                last_answer_or_commitment_id,
                last_answerer,
            )
        logger.info(f"Arbitrated answer with winner assignment submitted for {question_id}")

    def cancel_arbitration(self, caller: str, oracle: Oracle, question_id: str) -> None:
        """Return a frozen question to its open state on the oracle.

        The fee already paid stays in escrow.
        """
        with self._lock:
            self.access.guard(caller)
            self._call_oracle("cancel_arbitration", oracle.cancel_arbitration, self.identity, question_id)
        logger.info(f"Arbitration cancelled for {question_id}")

    # -------------------------------------------------------------------------
    # Funds
    # -------------------------------------------------------------------------

    def receive(self, sender: str, amount: int) -> None:
        """Accept a direct payment not tied to any question."""
        validate_identity(sender)
        validate_amount(amount)
        with self._lock:
            self._escrow_balance += amount
            logger.info(f"Received {amount} from {sender}")

    def withdraw(self, caller: str, destination: str) -> int:
        """Pay the entire escrow balance to a destination.

        The balance is cleared before the payout so a re-entrant call
        sees nothing left to take, and restored if the payout is refused.

        Returns:
            The amount paid out

        Raises:
            Unauthorized: If caller is not the operator
            TransferFailed: If the destination refuses the funds
        """
        with self._lock:
            self.access.guard(caller)
            validate_identity(destination)
            amount = self._escrow_balance
            self._escrow_balance = 0
            paid = False
            try:
                self.transfer.transfer(destination, amount)
                paid = True
            except Exception as e:
                logger.warning(f"Withdrawal of {amount} to {destination} refused: {e}")
                raise TransferFailed(
                    f"Transfer to {destination} failed",
                    {"destination": destination, "amount": amount},
                ) from e
            finally:
                # Restore on every exit without payment, BaseException included
                if not paid:
                    self._escrow_balance += amount

            logger.info(f"Withdrew {amount} to {destination}")
            self._emit(FundsWithdrawn(destination=destination, amount=amount))
        return amount

    def pull_oracle_funds(self, caller: str, oracle: Oracle) -> int:
        """Move funds an oracle holds for this gateway into escrow.

        Nothing leaves the gateway; call withdraw() afterwards to pay out.

        Returns:
            The amount released by the oracle
        """
        with self._lock:
            self.access.guard(caller)
            released = self._call_oracle("withdraw", oracle.withdraw, self.identity)
            try:
                amount = validate_amount(released or 0, "released")
            except ValueError as e:
                raise OracleCallFailed(
                    f"Oracle {_oracle_name(oracle)} reported an invalid withdrawal",
                    {"operation": "withdraw", "released": repr(released)},
                ) from e
            self._escrow_balance += amount

            logger.info(f"Pulled {amount} from {_oracle_name(oracle)}")
            self._emit(OracleFundsPulled(oracle=_oracle_name(oracle), amount=amount))
        return amount

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _call_oracle(self, operation: str, call: Callable[..., T], *args: Any) -> T:
        try:
            return call(*args)
        except OracleCallFailed:
            raise
        except Exception as e:
            logger.warning(f"Oracle rejected {operation}: {e}")
            raise OracleCallFailed(
                f"Oracle rejected {operation}",
                {"operation": operation, "reason": str(e)},
            ) from e

    def _emit(self, event: GatewayEvent) -> None:
        self.events.publish(event)


# =============================================================================
# FACTORY
# =============================================================================


def create_gateway(
    transfer: FundsTransfer,
    identity: str = "arbitrator",
    config: GatewayConfigProtocol | None = None,
    events: EventBus | None = None,
) -> ArbitrationGateway:
    """Build a gateway and its access control from configuration.

    Uses, in order, the given config, the injected global config, or
    settings read from the environment.

    Raises:
        InvalidIdentityError: If no valid operator is configured
    """
    config = config or get_gateway_config_or_none() or get_config()
    operator = validate_identity(config.operator)

    gateway = ArbitrationGateway(
        identity=identity,
        access=AccessControl(operator),
        transfer=transfer,
        events=events,
        default_fee=config.default_fee,
        metadata=config.metadata,
    )
    logger.info(f"Gateway {identity} created for operator {operator} (default fee {config.default_fee})")
    return gateway
