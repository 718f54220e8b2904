"""Payment Ledger - fee-splitting payment records and reward payouts.

Records payments between a sender and a recipient and pays the fee shares
to the broadcaster (first peer that relayed the payment), the relayer (peer
that submitted it) and the protocol operator.

Two ways to pay rewards:
- create_payment() then distribute_rewards(): the record is created pending
  and a payer settles the three fee shares later.
- record_and_distribute_rewards(): the relayer records the payment and pays
  the broadcaster and protocol shares in one call, keeping its own share.

Every operation is all-or-nothing with respect to ledger state:
- storage writes are staged and only flushed after all transfers succeed
- events are published only after the flush
- a failure leaves storage untouched and publishes nothing
- transfers made before a failing transfer are returned to their source
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, replace
from typing import Any
from uuid import UUID, uuid4

from meshpay_rewards.calculators.fees import FeeCalculator, FeeSplit
from meshpay_rewards.config import LedgerConfig
from meshpay_rewards.errors import (
    AlreadyInitializedError,
    AmountMismatchError,
    ArithmeticOverflowError,
    PaymentAlreadyClaimedError,
    PaymentNotFoundError,
    ProtocolNotConfiguredError,
    TransferFailedError,
)
from meshpay_rewards.events.emitter import EventEmitter
from meshpay_rewards.events.types import (
    BroadcasterRewardPaid,
    DomainEvent,
    EventMetadata,
    LedgerInitialized,
    PaymentCreated,
    PaymentRewardsDistributed,
    ProtocolRewardPaid,
    RelayerRewardPaid,
    RewardPaid,
)
from meshpay_rewards.providers.base import Authorizer, TransferReceipt, TransferService
from meshpay_rewards.storage.base import KeyedStorage
from meshpay_rewards.storage.keys import PAYMENT_COUNT, PROTOCOL, DataKey, PaymentKey

logger = logging.getLogger(__name__)

U64_MAX = 2**64 - 1


@dataclass(frozen=True)
class Payment:
    """Accounting state of one payment.

    All amounts are fixed at creation. Only `claimed` changes, once, when
    the rewards are distributed.
    """

    sender: str
    recipient: str
    broadcaster: str
    relayer: str
    gross_amount: int
    net_amount: int
    broadcaster_fee: int
    relayer_fee: int
    protocol_fee: int
    claimed: bool = False

    def __post_init__(self) -> None:
        total = self.net_amount + self.broadcaster_fee + self.relayer_fee + self.protocol_fee
        if total != self.gross_amount:
            raise ValueError(
                f"Payment amounts do not add up: {total} != gross {self.gross_amount}"
            )

    @property
    def amount(self) -> int:
        """Post-fee amount due to the recipient."""
        return self.net_amount

    @property
    def fees(self) -> FeeSplit:
        return FeeSplit(self.net_amount, self.broadcaster_fee, self.relayer_fee, self.protocol_fee)

    @classmethod
    def from_split(
        cls,
        *,
        sender: str,
        recipient: str,
        broadcaster: str,
        relayer: str,
        gross_amount: int,
        split: FeeSplit,
        claimed: bool = False,
    ) -> Payment:
        return cls(
            sender=sender,
            recipient=recipient,
            broadcaster=broadcaster,
            relayer=relayer,
            gross_amount=gross_amount,
            net_amount=split.net,
            broadcaster_fee=split.broadcaster_fee,
            relayer_fee=split.relayer_fee,
            protocol_fee=split.protocol_fee,
            claimed=claimed,
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Payment:
        return cls(**data)


class _StagedWrites:
    """Write buffer over a KeyedStorage.

    Reads see pending writes; nothing reaches storage until commit().
    """

    def __init__(self, storage: KeyedStorage):
        self._storage = storage
        self._pending: dict[str, tuple[DataKey, Any]] = {}

    def get(self, key: DataKey, default: Any = None) -> Any:
        if key.storage_key in self._pending:
            return self._pending[key.storage_key][1]
        return self._storage.get(key, default)

    def has(self, key: DataKey) -> bool:
        return key.storage_key in self._pending or self._storage.has(key)

    def set(self, key: DataKey, value: Any) -> None:
        self._pending[key.storage_key] = (key, value)

    def commit(self) -> None:
        for key, value in self._pending.values():
            self._storage.set(key, value)
        self._pending.clear()


def _require_account(value: object, name: str) -> str:
    if not isinstance(value, str) or not value:
        raise ValueError(f"{name} must be a non-empty account identifier")
    return value


class PaymentLedger:
    """Fee-splitting payment ledger.

    Notes:
    - One ledger per storage scope (storage.ledger_id).
    - Payment ids are allocated densely from 0 and never reused, even when
      a later distribution fails.
    - Authorization and value transfer are delegated to the injected
      authorizer and transfer service.

    Usage:
        ledger = PaymentLedger(
            storage=InMemoryStorage(),
            authorizer=SignatureAuthorizer(),
            transfers=InMemoryTokenProvider(),
        )
        ledger.initialize("GPROTOCOL")
        payment_id = ledger.create_payment(sender, recipient, broadcaster, relayer, 10_000)
        ledger.distribute_rewards(payment_id, 10_000, token, payer)
    """

    def __init__(
        self,
        storage: KeyedStorage,
        authorizer: Authorizer,
        transfers: TransferService,
        emitter: EventEmitter | None = None,
        config: LedgerConfig | None = None,
    ):
        self.storage = storage
        self.authorizer = authorizer
        self.transfers = transfers
        self.emitter = emitter or EventEmitter()
        self.config = config or LedgerConfig()
        self.calculator = FeeCalculator(self.config.fee_schedule)

    @property
    def ledger_id(self) -> str:
        return self.storage.ledger_id

    @property
    def protocol_address(self) -> str | None:
        """Protocol fee recipient, or None before initialize()."""
        return self.storage.get(PROTOCOL)

    @property
    def is_initialized(self) -> bool:
        return self.storage.has(PROTOCOL)

    # -------------------------------------------------------------------------
    # Setup
    # -------------------------------------------------------------------------

    def initialize(self, protocol_address: str) -> None:
        """Set the protocol fee recipient. One-shot.

        Raises:
            AlreadyInitializedError: if called a second time. State is
                left exactly as the first call set it.
        """
        _require_account(protocol_address, "protocol_address")
        if self.storage.has(PROTOCOL):
            raise AlreadyInitializedError(self.ledger_id)

        staged = _StagedWrites(self.storage)
        staged.set(PROTOCOL, protocol_address)
        # Payments created before initialization keep their ids
        if not staged.has(PAYMENT_COUNT):
            staged.set(PAYMENT_COUNT, 0)
        staged.commit()

        logger.info("Ledger %s initialized with protocol %s", self.ledger_id, protocol_address)
        self._publish(
            [LedgerInitialized(metadata=self._metadata(uuid4()), protocol_address=protocol_address)]
        )

    # -------------------------------------------------------------------------
    # Two-step flow: create, then distribute
    # -------------------------------------------------------------------------

    def create_payment(
        self,
        sender: str,
        recipient: str,
        broadcaster: str,
        relayer: str,
        amount: int,
    ) -> int:
        """Create a pending payment record. Caller must be the sender.

        The fee split of `amount` is computed and bound to the record now;
        distribute_rewards() pays exactly these fees later.

        Returns:
            The new payment id.
        """
        self._check_parties(sender, recipient, broadcaster, relayer)
        self.authorizer.require_auth(sender)

        split = self.calculator.calculate_fees(amount)
        staged = _StagedWrites(self.storage)
        payment_id = self._allocate_id(staged)
        payment = Payment.from_split(
            sender=sender,
            recipient=recipient,
            broadcaster=broadcaster,
            relayer=relayer,
            gross_amount=amount,
            split=split,
        )
        staged.set(PaymentKey(payment_id), payment.to_dict())
        staged.commit()

        logger.info(
            "Payment %s created on ledger %s: gross=%s net=%s",
            payment_id,
            self.ledger_id,
            amount,
            split.net,
        )
        self._publish(
            [
                PaymentCreated(
                    metadata=self._metadata(uuid4(), actor=sender),
                    payment_id=payment_id,
                    sender=sender,
                    recipient=recipient,
                    broadcaster=broadcaster,
                    relayer=relayer,
                    gross_amount=amount,
                    net_amount=split.net,
                )
            ]
        )
        return payment_id

    def distribute_rewards(
        self,
        payment_id: int,
        gross_amount: int,
        token: str,
        payer: str,
    ) -> None:
        """Pay the fee shares of a pending payment. Caller must be the payer.

        Transfers payer -> broadcaster, payer -> relayer, payer -> protocol
        (zero shares are skipped), marks the payment claimed and publishes
        one reward event per party in that order.

        Args:
            payment_id: Payment created by create_payment().
            gross_amount: Must equal the amount the payment was created
                with. The fees paid are the ones stored at creation.
            token: Asset contract to pay in.
            payer: Account funding the fees.

        Raises:
            ProtocolNotConfiguredError: before initialize().
            PaymentNotFoundError: unknown payment_id.
            PaymentAlreadyClaimedError: rewards already distributed.
            AmountMismatchError: gross_amount differs from the record.
            TransferFailedError: a transfer failed; earlier legs were
                returned to the payer and nothing was committed.
        """
        _require_account(token, "token")
        _require_account(payer, "payer")
        self.authorizer.require_auth(payer)

        protocol = self._require_protocol()
        payment = self.get_payment(payment_id)
        if payment.claimed:
            raise PaymentAlreadyClaimedError(payment_id)
        if gross_amount != payment.gross_amount:
            raise AmountMismatchError(payment_id, payment.gross_amount, gross_amount)

        shares: list[tuple[type[RewardPaid], str, int]] = [
            (BroadcasterRewardPaid, payment.broadcaster, payment.broadcaster_fee),
            (RelayerRewardPaid, payment.relayer, payment.relayer_fee),
            (ProtocolRewardPaid, protocol, payment.protocol_fee),
        ]
        self._pay_out(token, payer, [(recipient, amount) for _, recipient, amount in shares])

        staged = _StagedWrites(self.storage)
        staged.set(PaymentKey(payment_id), replace(payment, claimed=True).to_dict())
        staged.commit()

        logger.info(
            "Rewards for payment %s distributed by %s: broadcaster=%s relayer=%s protocol=%s",
            payment_id,
            payer,
            payment.broadcaster_fee,
            payment.relayer_fee,
            payment.protocol_fee,
        )
        correlation_id = uuid4()
        self._publish(
            [
                event_cls(
                    metadata=self._metadata(correlation_id, actor=payer),
                    payment_id=payment_id,
                    recipient=recipient,
                    amount=amount,
                    token=token,
                )
                for event_cls, recipient, amount in shares
            ]
        )

    # -------------------------------------------------------------------------
    # One-step flow
    # -------------------------------------------------------------------------

    def record_and_distribute_rewards(
        self,
        sender: str,
        recipient: str,
        broadcaster: str,
        relayer: str,
        gross_amount: int,
        token: str,
    ) -> int:
        """Record a payment and pay its fee shares. Caller must be the relayer.

        The relayer funds the distribution: it pays the broadcaster and
        protocol shares (when positive) and keeps its own share. The full
        split is stored on a record that is claimed from the start.

        Returns:
            The new payment id.
        """
        self._check_parties(sender, recipient, broadcaster, relayer)
        _require_account(token, "token")
        self.authorizer.require_auth(relayer)

        protocol = self._require_protocol()
        split = self.calculator.calculate_fees(gross_amount)

        staged = _StagedWrites(self.storage)
        payment_id = self._allocate_id(staged)
        payment = Payment.from_split(
            sender=sender,
            recipient=recipient,
            broadcaster=broadcaster,
            relayer=relayer,
            gross_amount=gross_amount,
            split=split,
            claimed=True,
        )

        self._pay_out(
            token,
            relayer,
            [(broadcaster, split.broadcaster_fee), (protocol, split.protocol_fee)],
        )

        staged.set(PaymentKey(payment_id), payment.to_dict())
        staged.commit()

        logger.info(
            "Payment %s recorded and distributed by relayer %s: gross=%s net=%s",
            payment_id,
            relayer,
            gross_amount,
            split.net,
        )
        self._publish(
            [
                PaymentRewardsDistributed(
                    metadata=self._metadata(uuid4(), actor=relayer),
                    payment_id=payment_id,
                    sender=sender,
                    recipient=recipient,
                    broadcaster=broadcaster,
                    relayer=relayer,
                    gross_amount=gross_amount,
                    net_amount=split.net,
                    broadcaster_fee=split.broadcaster_fee,
                    relayer_fee=split.relayer_fee,
                    protocol_fee=split.protocol_fee,
                    token=token,
                )
            ]
        )
        return payment_id

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get_payment(self, payment_id: int) -> Payment:
        """Return a copy of a stored payment.

        Raises:
            PaymentNotFoundError: if no payment has this id.
        """
        if isinstance(payment_id, bool) or not isinstance(payment_id, int):
            raise TypeError(f"payment_id must be an int, got {type(payment_id).__name__}")
        if payment_id < 0:
            raise PaymentNotFoundError(payment_id)

        data = self.storage.get(PaymentKey(payment_id))
        if data is None:
            raise PaymentNotFoundError(payment_id)
        return Payment.from_dict(data)

    def get_payment_count(self) -> int:
        """Number of payments ever created (also the next id)."""
        return self.storage.get(PAYMENT_COUNT, 0)

    def calculate_fees(self, gross_amount: int) -> FeeSplit:
        """Read-only fee query using this ledger's schedule."""
        return self.calculator.calculate_fees(gross_amount)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _check_parties(self, sender: str, recipient: str, broadcaster: str, relayer: str) -> None:
        _require_account(sender, "sender")
        _require_account(recipient, "recipient")
        _require_account(broadcaster, "broadcaster")
        _require_account(relayer, "relayer")

    def _require_protocol(self) -> str:
        protocol = self.storage.get(PROTOCOL)
        if protocol is None:
            raise ProtocolNotConfiguredError(self.ledger_id)
        return protocol

    def _allocate_id(self, staged: _StagedWrites) -> int:
        payment_id = staged.get(PAYMENT_COUNT, 0)
        if payment_id >= U64_MAX:
            raise ArithmeticOverflowError("payment counter exhausted")
        if staged.has(PaymentKey(payment_id)):
            raise RuntimeError(
                f"Payment {payment_id} already exists on ledger {self.ledger_id}; counter is corrupt"
            )
        staged.set(PAYMENT_COUNT, payment_id + 1)
        return payment_id

    def _pay_out(
        self,
        token: str,
        source: str,
        legs: list[tuple[str, int]],
    ) -> list[TransferReceipt]:
        """Run transfers in order, skipping zero amounts.

        If a transfer fails, the ones already made are sent back before the
        error propagates.
        """
        receipts: list[TransferReceipt] = []
        for destination, amount in legs:
            if amount <= 0:
                continue
            try:
                receipts.append(self.transfers.transfer(token, source, destination, amount))
            except TransferFailedError as e:
                logger.warning(
                    "Transfer %s -> %s of %s %s failed after %d completed: %s",
                    source,
                    destination,
                    amount,
                    token,
                    len(receipts),
                    e.reason,
                )
                e.reversals, e.completed = self._reverse(receipts)
                raise
        return receipts

    def _reverse(
        self, receipts: list[TransferReceipt]
    ) -> tuple[list[TransferReceipt], list[TransferReceipt]]:
        """Return each transfer to its source, newest first.

        Returns (reversal receipts, transfers that could not be returned).
        """
        reversals: list[TransferReceipt] = []
        outstanding: list[TransferReceipt] = []
        for receipt in reversed(receipts):
            try:
                reversals.append(
                    self.transfers.transfer(
                        receipt.token, receipt.destination, receipt.source, receipt.amount
                    )
                )
            except TransferFailedError as e:
                logger.error(
                    "Could not return transfer %s (%s %s to %s): %s",
                    receipt.transfer_id,
                    receipt.amount,
                    receipt.token,
                    receipt.destination,
                    e.reason,
                )
                outstanding.append(receipt)
        outstanding.reverse()
        return reversals, outstanding

    def _metadata(self, correlation_id: UUID, actor: str | None = None) -> EventMetadata:
        return EventMetadata.create(
            ledger_id=self.ledger_id,
            correlation_id=correlation_id,
            actor=actor,
        )

    def _publish(self, events: list[DomainEvent]) -> None:
        if not self.config.emit_events:
            return
        with self.emitter.batch() as batch:
            for event in events:
                batch.add(event)
