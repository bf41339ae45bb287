"""
Telegram message formatters (HTML parse mode).
"""

import html
import math
from datetime import datetime
from decimal import Decimal
from typing import Optional

from market_sentinel.domain.models import (
    FundState,
    MarketIndicators,
    RebalanceResult,
    TradeSignal,
)
from market_sentinel.domain.strategy.tier_policy import get_tier_table

HELP_TEXT = (
    "🤖 <b>MarketSentinel commands</b>\n\n"
    "/weekly - run this week's evaluation now\n"
    "/fund - fund pool status\n"
    "/monthly - monthly summary\n"
    "/tiers - score to tier table\n"
    "/help - this message"
)


def _money(value: Decimal) -> str:
    return f"{value:,.0f}"


def _today(now: Optional[datetime], fmt: str) -> str:
    return (now or datetime.now()).strftime(fmt)


def format_weekly_report(
    indicators: MarketIndicators,
    signal: TradeSignal,
    now: Optional[datetime] = None,
) -> str:
    deviation = indicators.ma200_deviation_pct or 0.0
    lines = [
        f"📊 <b>MarketSentinel weekly</b> | {_today(now, '%Y-%m-%d')}",
        "",
        f"Price: {indicators.current_price:.2f}",
        f"MA200: {indicators.ma200:.2f} (deviation {deviation:+.1f}%)",
        f"MA20w: {indicators.ma20w:.2f} | MA50w: {indicators.ma50w:.2f}",
        "",
        "📈 <b>Factor scores:</b>",
    ]
    for factor in signal.factors:
        lines.append(
            f"  {html.escape(factor.name)} ({html.escape(factor.commentary)}): "
            f"{factor.raw_score:+.1f} (×{factor.weight:.2f}) = {factor.weighted:+.3f}"
        )
    lines += [
        "  ─────────────────",
        f"  Composite: {signal.total_score:+.3f}",
        "",
        f"💰 <b>This week:</b> {html.escape(signal.tier.label)} {signal.tier.multiplier:.2f}x",
        f"   Amount: {_money(signal.final_amount)} (base {_money(signal.base_amount)})",
    ]
    if signal.reserve_used > 0:
        lines.append(f"   Reserve used: {_money(signal.reserve_used)}")
    if signal.warning_message:
        lines += ["", html.escape(signal.warning_message)]
    return "\n".join(lines) + "\n"


def format_fund_status(state: FundState) -> str:
    updated = state.updated_at.strftime("%Y-%m-%d %H:%M") if state.updated_at else "never"
    return (
        "📦 <b>Fund pools</b>\n\n"
        f"Monthly budget: {_money(state.monthly_budget)}\n"
        f"Weekly base N: {_money(state.weekly_base_n)}\n"
        f"Regular pool: {_money(state.regular_balance)}\n"
        f"Reserve pool: {_money(state.reserve_balance)}\n"
        f"Bottom-fish used this week: {'yes' if state.bottom_fish_used_this_week else 'no'}\n"
        f"High-score streak: {state.consecutive_high_score_weeks} weeks\n"
        f"Updated: {updated}\n"
    )


def format_monthly_summary(state: FundState, now: Optional[datetime] = None) -> str:
    lines = [
        f"📅 <b>Monthly summary</b> | {_today(now, '%Y-%m')}",
        "",
        f"Regular pool: {_money(state.regular_balance)}",
        f"Reserve pool: {_money(state.reserve_balance)}",
    ]
    average = state.average_recent_score
    if average is not None:
        lines.append(f"Recent average score: {average:+.3f} ({len(state.recent_scores)} weeks)")
    lines += ["", "Monthly replenishment done ✅"]
    return "\n".join(lines)


def format_bottom_fish(indicators: MarketIndicators, total_score: float, amount: Decimal) -> str:
    return (
        f"🎣 <b>Bottom-fish triggered</b> | daily RSI={indicators.daily_rsi:.0f}\n\n"
        f"Composite: {total_score:+.3f}\n"
        f"Amount: {_money(amount)} (reserve pool)\n"
    )


def format_take_profit(indicators: MarketIndicators) -> str:
    return (
        "⚠️ <b>Take-profit warning</b>\n\n"
        f"Daily RSI: {indicators.daily_rsi:.0f} | Weekly RSI: {indicators.weekly_rsi:.0f}\n"
        f"Price: {indicators.current_price:.2f}\n"
        "Consider partial profit taking"
    )


def format_quarterly(result: RebalanceResult) -> str:
    return (
        "📊 <b>Quarterly rebalance</b>\n\n"
        f"{html.escape(result.message)}\n"
        f"Amount: {_money(result.amount)}\n\n"
        f"{format_fund_status(result.state_after)}"
    )


def format_collect_failure(task: str, error: Exception) -> str:
    return f"❌ {task} data collection failed: {html.escape(str(error))}"


def format_tier_table() -> str:
    lines = ["📐 <b>Score → tier</b>", ""]
    for threshold, tier in get_tier_table():
        bound = "else" if math.isinf(threshold) else f"≥ {threshold:+.1f}"
        reserve = f" + {tier.reserve_use}N reserve" if tier.uses_reserve else ""
        lines.append(f"{bound}: {html.escape(tier.label)} {tier.multiplier}N{reserve}")
    return "\n".join(lines)
