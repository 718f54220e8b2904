"""Configuration for the rewards ledger.

Two layers:
    1. Settings - process settings loaded from the environment (.env aware).
    2. FeeSchedule / LedgerConfig - explicit, immutable objects passed to a
       ledger instance. No globals; each ledger has its own config.

Pattern:
    ledger = PaymentLedger(
        storage=...,
        authorizer=...,
        transfers=...,
        config=LedgerConfig(fee_schedule=FeeSchedule()),
    )
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache

from dotenv import load_dotenv

BPS_DENOMINATOR = 10_000

# Stellar Asset Contract for native XLM on testnet
NATIVE_XLM_TOKEN = "CDLZFC3SYJYDZT7K67VZ75HPJVIEUVNIXF47ZG2FB2RMQQVU2HHGCYSC"


@dataclass(frozen=True)
class FeeSchedule:
    """
    Fee rates in basis points (parts per 10000).

    Attributes:
        broadcaster_bps: Share for the first peer that relayed the payment
            from the offline sender. Default 50 (0.50%).
        relayer_bps: Share for the peer that submitted the payment on-chain.
            Default 10 (0.10%).
        protocol_bps: Share for the protocol operator. Default 40 (0.40%).
    """

    broadcaster_bps: int = 50
    relayer_bps: int = 10
    protocol_bps: int = 40

    def __post_init__(self) -> None:
        """Validate configuration."""
        for name in ("broadcaster_bps", "relayer_bps", "protocol_bps"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool):
                raise TypeError(f"{name} must be an int")
            if value < 0 or value > BPS_DENOMINATOR:
                raise ValueError(f"{name} must be between 0 and {BPS_DENOMINATOR}")
        if self.total_bps > BPS_DENOMINATOR:
            raise ValueError(f"total fee cannot exceed {BPS_DENOMINATOR} bps, got {self.total_bps}")

    @property
    def total_bps(self) -> int:
        """Combined fee rate."""
        return self.broadcaster_bps + self.relayer_bps + self.protocol_bps


DEFAULT_FEE_SCHEDULE = FeeSchedule()


@dataclass(frozen=True)
class LedgerConfig:
    """
    Ledger behavior configuration.

    Attributes:
        fee_schedule: Rates used for every split this ledger computes.
        emit_events: If True, publish domain events to the emitter.
            Default True.
    """

    fee_schedule: FeeSchedule = field(default_factory=FeeSchedule)
    emit_events: bool = True


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment."""

    database_url: str
    protocol_address: str | None
    token_address: str
    debug: bool

    @classmethod
    def from_env(cls) -> Settings:
        """Load settings from environment variables."""
        load_dotenv()

        return cls(
            database_url=os.getenv("DATABASE_URL", "sqlite:///meshpay_rewards.db"),
            protocol_address=os.getenv("MESHPAY_PROTOCOL_ADDRESS") or None,
            token_address=os.getenv("MESHPAY_TOKEN_ADDRESS", NATIVE_XLM_TOKEN),
            debug=os.getenv("DEBUG", "false").lower() == "true",
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings.from_env()
