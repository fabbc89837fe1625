"""
SQLAlchemy table definitions: devs and tokens.

Only used to create the schema on an empty database; queries go through
StorageHandle with plain SQL so any backend with all/first/run can serve them.
Timestamps are Unix seconds. Market caps and volume are decimal strings to
avoid precision loss.
"""

from __future__ import annotations

from sqlalchemy import Column, Float, ForeignKey, Integer, String
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class Dev(Base):
    """A token-launching developer and their latest reputation snapshot."""

    __tablename__ = "devs"

    id = Column(String(64), primary_key=True)
    wallet_address = Column(String(64), unique=True, nullable=False, index=True)
    alias = Column(String(128), nullable=True)
    verified = Column(Integer, nullable=False, default=0, server_default="0")  # 1 = verified
    score = Column(Integer, nullable=False, default=50, server_default="50", index=True)
    tier = Column(String(16), nullable=False, default="silver", server_default="silver")
    total_launches = Column(Integer, nullable=False, default=0, server_default="0")
    successful_launches = Column(Integer, nullable=False, default=0, server_default="0")
    rug_count = Column(Integer, nullable=False, default=0, server_default="0")
    total_volume = Column(String(64), nullable=False, default="0", server_default="0")
    avg_ath_multiplier = Column(Float, nullable=False, default=0.0, server_default="0")
    created_at = Column(Integer, nullable=True)
    updated_at = Column(Integer, nullable=True, index=True)


class Token(Base):
    """A token launched by a dev. status: active | rugged | graduated | ..."""

    __tablename__ = "tokens"

    id = Column(Integer, primary_key=True, autoincrement=True)
    contract_address = Column(String(128), nullable=False, index=True)
    chain = Column(String(32), nullable=False, default="solana", server_default="solana", index=True)
    name = Column(String(128), nullable=True)
    symbol = Column(String(32), nullable=True)
    status = Column(String(32), nullable=False, default="active", server_default="active")
    market_cap = Column(String(64), nullable=True)  # initial market cap at launch
    ath_market_cap = Column(String(64), nullable=True)
    liquidity = Column(String(64), nullable=True)  # last known pool liquidity (USD)
    created_at = Column(Integer, nullable=True, index=True)
    rug_detected_at = Column(Integer, nullable=True)
    creator_dev_id = Column(String(64), ForeignKey("devs.id"), nullable=False, index=True)
