"""Prize pool settlement with smart rounding.

All arithmetic is exact ``Decimal`` so the reconciliation identity

    admin_tax + main_event_pot + sum(prizes) == gross_total

holds with zero tolerance. Prizes are rounded to the nearest multiple of ten
(halves away from zero) and the leftover is absorbed by the admin tax line.
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal

from .models import ZERO, CostConfig, PlayerBalance, PlayerSession, PrizeSplit, SettlementResult

__all__ = [
    "ADMIN_TAX_RATE",
    "MAIN_EVENT_RATE",
    "PRIZE_SHARES",
    "bbq_shares",
    "gross_total",
    "settle",
    "smart_round",
]

ADMIN_TAX_RATE = Decimal("0.15")
MAIN_EVENT_RATE = Decimal("0.05")
PRIZE_SHARES = (Decimal("0.50"), Decimal("0.30"), Decimal("0.20"))
ROUNDING_STEP = Decimal(10)
CENT = Decimal("0.01")


def smart_round(amount: Decimal) -> Decimal:
    """Round ``amount`` to the nearest multiple of 10, halves away from zero."""

    tens = (amount / ROUNDING_STEP).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    return tens * ROUNDING_STEP


def gross_total(sessions: Sequence[PlayerSession], config: CostConfig) -> Decimal:
    return sum((config.paid_in(s) for s in sessions), ZERO)


def bbq_shares(bbq: Decimal, headcount: int) -> list[Decimal]:
    """Split ``bbq`` into ``headcount`` cent amounts that add up to it.

    Every share is the per-head amount rounded down to the cent; the leftover
    cents go one each to the first sessions.
    """

    if headcount <= 0:
        return []
    base = (bbq / headcount).quantize(CENT, rounding=ROUND_DOWN)
    total = bbq.quantize(CENT, rounding=ROUND_HALF_UP)
    extra = int((total - base * headcount) / CENT)
    return [base + CENT if index < extra else base for index in range(headcount)]


def settle(sessions: Sequence[PlayerSession], config: CostConfig) -> SettlementResult:
    gross = gross_total(sessions, config)
    admin_tax_raw = gross * ADMIN_TAX_RATE
    main_event_pot = gross * MAIN_EVENT_RATE
    net_prize_pool = gross - admin_tax_raw - main_event_pot

    first, second, third = (smart_round(net_prize_pool * share) for share in PRIZE_SHARES)
    prizes = PrizeSplit(first=first, second=second, third=third)
    rounding_adjustment = net_prize_pool - prizes.total

    shares = bbq_shares(config.bbq, len(sessions))
    balances: list[PlayerBalance] = []
    for session, share in zip(sessions, shares, strict=True):
        paid = config.paid_in(session)
        prize = prizes.for_rank(session.rank)
        balances.append(
            PlayerBalance(
                player_id=session.player_id,
                total_paid=paid,
                prize_received=prize,
                bbq_share=share,
                net_balance=prize - paid - share,
            )
        )

    return SettlementResult(
        gross_total=gross,
        admin_tax=admin_tax_raw + rounding_adjustment,
        main_event_pot=main_event_pot,
        net_prize_pool=net_prize_pool,
        prizes=prizes,
        rounding_adjustment=rounding_adjustment,
        balances=tuple(balances),
    )
