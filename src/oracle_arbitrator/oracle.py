"""Oracle collaborator interface.

The oracle owns the question lifecycle (asking, bonding, finalization).
The gateway only reaches it through this protocol, passing its own
identity as ``caller`` so the oracle can check that the request comes from
the arbitrator named on the question. Implementations signal refusal by
raising; the gateway turns any such exception into ``OracleCallFailed``.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Oracle(Protocol):
    """Capabilities the gateway needs from a question/answer oracle."""

    def set_question_fee(self, caller: str, fee: int) -> None:
        """Set the fee charged to askers who name ``caller`` as arbitrator."""
        ...

    def notify_of_arbitration_request(
        self,
        caller: str,
        question_id: str,
        requester: str,
        max_previous: int,
    ) -> None:
        """Freeze a question pending arbitration.

        ``max_previous`` is the highest current bond the requester accepts;
        zero means no limit. Raises if the question cannot be arbitrated.
        """
        ...

    def submit_answer_by_arbitrator(
        self,
        caller: str,
        question_id: str,
        answer: bytes,
        answerer: str,
    ) -> None:
        """Finalize a question pending arbitration with the given answer."""
        ...

    def assign_winner_and_submit_answer_by_arbitrator(
        self,
        caller: str,
        question_id: str,
        answer: bytes,
        payee_if_wrong: str,
        last_history_hash: bytes,
        last_answer_or_commitment_id: bytes,
        last_answerer: str,
    ) -> None:
        """Finalize a question and let the oracle pick who is credited."""
        ...

    def cancel_arbitration(self, caller: str, question_id: str) -> None:
        """Return a question pending arbitration to its open state."""
        ...

    def withdraw(self, caller: str) -> int:
        """Release funds held for ``caller`` and return the amount released."""
        ...
