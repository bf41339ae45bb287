"""
Database Models (SQLAlchemy ORM)
Insert-only history tables - NO UPDATES, NO DELETES
"""

from sqlalchemy import Column, Float, Integer, String, Text

from market_sentinel.infrastructure.db.database import Base


class WeeklySnapshotModel(Base):
    """One row per weekly evaluation: indicators, factor scores, outcome"""
    __tablename__ = "weekly_snapshots"

    id = Column(Integer, primary_key=True, autoincrement=True)
    timestamp = Column(Integer, nullable=False, index=True)

    current_price = Column(Float)
    ma200 = Column(Float)
    ma20w = Column(Float)
    ma50w = Column(Float)
    weekly_rsi = Column(Float)
    daily_rsi = Column(Float)
    high_52w = Column(Float)
    low_52w = Column(Float)
    position_52w = Column(Float)

    # Weighted factor scores in evaluation order
    factor1_score = Column(Float)
    factor2_score = Column(Float)
    factor3_score = Column(Float)
    factor4_score = Column(Float)
    factor5_score = Column(Float)
    total_score = Column(Float)

    tier_label = Column(String(32))
    tier_multiplier = Column(Float)
    tier_reserve = Column(Float)
    base_amount = Column(Float)
    final_amount = Column(Float)
    reserve_used = Column(Float)
    regular_balance = Column(Float)
    reserve_balance = Column(Float)


class DailyCheckModel(Base):
    """Bottom-fish and take-profit triggers from the daily check"""
    __tablename__ = "daily_checks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    timestamp = Column(Integer, nullable=False, index=True)
    daily_rsi = Column(Float)
    weekly_rsi = Column(Float)
    price = Column(Float)
    event_type = Column(String(32))
    amount = Column(Float)
    total_score = Column(Float)


class FundHistoryModel(Base):
    """Every pool balance change"""
    __tablename__ = "fund_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    timestamp = Column(Integer, nullable=False, index=True)
    event_type = Column(String(32))
    regular_before = Column(Float)
    regular_after = Column(Float)
    reserve_before = Column(Float)
    reserve_after = Column(Float)
    amount = Column(Float)
    note = Column(Text)


class MonthlyEventModel(Base):
    __tablename__ = "monthly_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    timestamp = Column(Integer, nullable=False, index=True)
    regular_added = Column(Float)
    reserve_added = Column(Float)
    regular_after = Column(Float)
    reserve_after = Column(Float)
    avg_score = Column(Float)


class QuarterlyEventModel(Base):
    __tablename__ = "quarterly_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    timestamp = Column(Integer, nullable=False, index=True)
    action = Column(String(32))
    amount = Column(Float)
    regular_after = Column(Float)
    reserve_after = Column(Float)
    note = Column(Text)
