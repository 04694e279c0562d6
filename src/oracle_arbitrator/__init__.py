"""Arbitration fee gateway for question/answer oracles.

Lets a single operator price disputes and lets anyone pay that price to
have a question frozen pending the operator's arbitration.

Key concepts:
- Operator: the one identity allowed to change configuration or move funds
- Effective fee: a question's custom fee if positive, else the default fee
- Escrow: pooled arbitration payments awaiting withdrawal by the operator
- Oracle: the external question/answer system being arbitrated
"""

# Access control
from .access import AccessControl

# Configuration
from .config import (
    GatewayConfigProtocol,
    GatewaySettings,
    clear_config_cache,
    clear_gateway_config,
    get_config,
    get_gateway_config_or_none,
    set_gateway_config,
)

# Signals
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

# Exceptions
from .exceptions import (
    FeeNotConfigured,
    GatewayException,
    InsufficientPayment,
    InvalidAmountError,
    InvalidIdentityError,
    OracleCallFailed,
    TransferFailed,
    Unauthorized,
)
from .fees import DisputeFeeSchedule, validate_amount

# Core
from .gateway import ArbitrationGateway, GatewayState, create_gateway
from .identity import (
    generate_identity,
    identity_from_public_key,
    public_key_from_identity,
    validate_identity,
)
from .ledger import FundsTransfer, Ledger
from .oracle import Oracle

__all__ = [
    # Access control
    "AccessControl",
    # Configuration
    "GatewayConfigProtocol",
    "GatewaySettings",
    "clear_config_cache",
    "clear_gateway_config",
    "get_config",
    "get_gateway_config_or_none",
    "set_gateway_config",
    # Signals
    "ArbitrationRequested",
    "CustomFeeChanged",
    "DefaultFeeChanged",
    "EventBus",
    "FundsWithdrawn",
    "GatewayEvent",
    "MetadataChanged",
    "OperatorTransferred",
    "OracleFundsPulled",
    "QuestionFeeConfigured",
    # Exceptions
    "FeeNotConfigured",
    "GatewayException",
    "InsufficientPayment",
    "InvalidAmountError",
    "InvalidIdentityError",
    "OracleCallFailed",
    "TransferFailed",
    "Unauthorized",
    # Fees
    "DisputeFeeSchedule",
    "validate_amount",
    # Core
    "ArbitrationGateway",
    "GatewayState",
    "create_gateway",
    # Identity
    "generate_identity",
    "identity_from_public_key",
    "public_key_from_identity",
    "validate_identity",
    # Funds
    "FundsTransfer",
    "Ledger",
    # Oracle
    "Oracle",
]
