"""MeshPay rewards ledger.

This package contains:
- Fee calculation (broadcaster / relayer / protocol split)
- The payment ledger (records, one-shot initialization, reward payouts)
- Storage adapters (in-memory, SQL)
- Authorization and token transfer adapters
- Domain events
"""

from meshpay_rewards.calculators import (
    FeeCalculator,
    FeeSplit,
    calculate_fees,
    calculate_gross_amount,
    format_fee_breakdown,
    from_stroops,
    to_stroops,
)
from meshpay_rewards.config import (
    DEFAULT_FEE_SCHEDULE,
    FeeSchedule,
    LedgerConfig,
    Settings,
    get_settings,
)
from meshpay_rewards.errors import (
    AlreadyInitializedError,
    AmountMismatchError,
    ArithmeticOverflowError,
    InvalidAmountError,
    LedgerError,
    NotAuthorizedError,
    PaymentAlreadyClaimedError,
    PaymentNotFoundError,
    ProtocolNotConfiguredError,
    TransferFailedError,
)
from meshpay_rewards.events import (
    BroadcasterRewardPaid,
    DomainEvent,
    EventCategory,
    EventEmitter,
    EventMetadata,
    EventStore,
    LedgerInitialized,
    PaymentCreated,
    PaymentRewardsDistributed,
    ProtocolRewardPaid,
    RelayerRewardPaid,
    RewardPaid,
    StoredEvent,
)
from meshpay_rewards.providers import (
    Authorizer,
    InMemoryTokenProvider,
    SignatureAuthorizer,
    TransferReceipt,
    TransferService,
)
from meshpay_rewards.services import Payment, PaymentLedger
from meshpay_rewards.storage import InMemoryStorage, KeyedStorage, SqlStorage

__all__ = [
    # Fees
    "FeeCalculator",
    "FeeSplit",
    "calculate_fees",
    "calculate_gross_amount",
    "format_fee_breakdown",
    "from_stroops",
    "to_stroops",
    # Config
    "DEFAULT_FEE_SCHEDULE",
    "FeeSchedule",
    "LedgerConfig",
    "Settings",
    "get_settings",
    # Errors
    "LedgerError",
    "AlreadyInitializedError",
    "AmountMismatchError",
    "ArithmeticOverflowError",
    "InvalidAmountError",
    "NotAuthorizedError",
    "PaymentAlreadyClaimedError",
    "PaymentNotFoundError",
    "ProtocolNotConfiguredError",
    "TransferFailedError",
    # Ledger
    "Payment",
    "PaymentLedger",
    # Storage
    "KeyedStorage",
    "InMemoryStorage",
    "SqlStorage",
    # Providers
    "Authorizer",
    "TransferService",
    "TransferReceipt",
    "SignatureAuthorizer",
    "InMemoryTokenProvider",
    # Events
    "DomainEvent",
    "EventMetadata",
    "EventCategory",
    "EventEmitter",
    "EventStore",
    "StoredEvent",
    "LedgerInitialized",
    "PaymentCreated",
    "RewardPaid",
    "BroadcasterRewardPaid",
    "RelayerRewardPaid",
    "ProtocolRewardPaid",
    "PaymentRewardsDistributed",
]
