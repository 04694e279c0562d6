"""Global test fixtures for oracle-arbitrator test suite."""

from __future__ import annotations

import os
from typing import Any

import pytest

from oracle_arbitrator import AccessControl, ArbitrationGateway, EventBus, Ledger


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests (no external dependencies)")
    config.addinivalue_line("markers", "integration: Integration tests (several components together)")


# ============================================================================
# Environment Fixtures
# ============================================================================


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> Any:
    """Remove all ARBITRATOR_ environment variables."""
    from oracle_arbitrator.config import clear_config_cache, clear_gateway_config

    for key in list(os.environ.keys()):
        if key.startswith("ARBITRATOR_"):
            monkeypatch.delenv(key, raising=False)
    clear_config_cache()
    clear_gateway_config()
    yield
    clear_config_cache()
    clear_gateway_config()


# ============================================================================
# Oracle Double
# ============================================================================


class OracleRejected(Exception):
    """Raised by RecordingOracle for a capability told to reject."""


class RecordingOracle:
    """Oracle double that records calls and can reject any capability."""

    def __init__(self, identity: str = "did:key:oracle", releasable: int = 0) -> None:
        self.identity = identity
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.rejecting: set[str] = set()
        self.releasable = releasable
        self.question_fee: int | None = None
        self.pending: set[str] = set()
        self.finalized: dict[str, bytes] = {}
        self.on_notify: Any = None

    def reject(self, *operations: str) -> None:
        self.rejecting.update(operations)

    def _record(self, operation: str, *args: Any) -> None:
        self.calls.append((operation, args))
        if operation in self.rejecting:
            raise OracleRejected(f"{operation} rejected")

    def set_question_fee(self, caller: str, fee: int) -> None:
        self._record("set_question_fee", caller, fee)
        self.question_fee = fee

    def notify_of_arbitration_request(self, caller: str, question_id: str, requester: str, max_previous: int) -> None:
        self._record("notify_of_arbitration_request", caller, question_id, requester, max_previous)
        if question_id in self.pending or question_id in self.finalized:
            raise OracleRejected("question is not arbitrable")
        if self.on_notify is not None:
            self.on_notify()
        self.pending.add(question_id)

    def submit_answer_by_arbitrator(self, caller: str, question_id: str, answer: bytes, answerer: str) -> None:
        self._record("submit_answer_by_arbitrator", caller, question_id, answer, answerer)
        if question_id not in self.pending:
            raise OracleRejected("question is not pending arbitration")
        self.pending.discard(question_id)
        self.finalized[question_id] = answer

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
        self._record(
            "assign_winner_and_submit_answer_by_arbitrator",
            caller,
            question_id,
            answer,
            payee_if_wrong,
            last_history_hash,
            last_answer_or_commitment_id,
            last_answerer,
        )
        if question_id not in self.pending:
            raise OracleRejected("question is not pending arbitration")
        self.pending.discard(question_id)
        self.finalized[question_id] = answer

    def cancel_arbitration(self, caller: str, question_id: str) -> None:
        self._record("cancel_arbitration", caller, question_id)
        if question_id not in self.pending:
            raise OracleRejected("question is not pending arbitration")
        self.pending.discard(question_id)

    def withdraw(self, caller: str) -> int:
        self._record("withdraw", caller)
        released, self.releasable = self.releasable, 0
        return released


# ============================================================================
# Gateway Fixtures
# ============================================================================


@pytest.fixture
def operator() -> str:
    """Identity operating the gateway fixture."""
    return "did:key:operator"


@pytest.fixture
def ledger() -> Ledger:
    return Ledger()


@pytest.fixture
def events() -> EventBus:
    return EventBus()


@pytest.fixture
def oracle_factory() -> Any:
    """Factory for oracle doubles."""

    def factory(identity: str = "did:key:oracle", releasable: int = 0) -> RecordingOracle:
        return RecordingOracle(identity=identity, releasable=releasable)

    return factory


@pytest.fixture
def oracle(oracle_factory: Any) -> RecordingOracle:
    return oracle_factory()


@pytest.fixture
def gateway(operator: str, ledger: Ledger, events: EventBus) -> ArbitrationGateway:
    """Gateway with no fees configured, paying out through the ledger fixture."""
    return ArbitrationGateway(
        identity="did:key:arbitrator",
        access=AccessControl(operator),
        transfer=ledger,
        events=events,
    )
