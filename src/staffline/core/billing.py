"""Markup and commission arithmetic shared by provisioning, billing and invoicing.

Amounts are carried as :class:`~decimal.Decimal` at full precision. Rounding to
cents happens once, through :func:`to_money`, when a value is stored or shown.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Literal

MarkupKind = Literal["Percent", "Dollar"]

CENT = Decimal("0.01")
HUNDRED = Decimal(100)
ZERO = Decimal(0)


@dataclass(frozen=True, slots=True)
class Markup:
    kind: MarkupKind
    value: Decimal


@dataclass(frozen=True, slots=True)
class BillingResult:
    base_total: Decimal
    client_total: Decimal
    provider_total: Decimal
    profit: Decimal
    profit_margin: Decimal

    def rounded(self) -> BillingResult:
        return BillingResult(
            base_total=to_money(self.base_total),
            client_total=to_money(self.client_total),
            provider_total=to_money(self.provider_total),
            profit=to_money(self.profit),
            profit_margin=to_money(self.profit_margin),
        )


def to_decimal(value: Decimal | int | float | str) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() keeps 0.1 as 0.1 instead of its binary expansion
    return Decimal(str(value))


def to_money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def markup_from_config(kind: str | None, value: Decimal | None) -> Markup | None:
    """Build a :class:`Markup` from a company's stored columns, or ``None`` if unset."""
    if not kind or value is None:
        return None
    return Markup(kind=kind, value=to_decimal(value))  # type: ignore[arg-type]


def calculate_bill(
    hours_worked: Decimal | int | float | str,
    service_rate: Decimal | int | float | str,
    markup: Markup | None = None,
    commission: Decimal | int | float | str | None = None,
) -> BillingResult:
    """Compute client and provider totals for one engagement.

    Commission is taken off the base total, not off the marked-up client total,
    so a client's markup never changes what the provider is paid.
    """
    base_total = to_decimal(hours_worked) * to_decimal(service_rate)

    client_total = base_total
    if markup is not None:
        if markup.kind == "Percent":
            client_total = base_total * (1 + markup.value / HUNDRED)
        elif markup.kind == "Dollar":
            client_total = base_total + markup.value

    provider_total = base_total
    if commission is not None:
        provider_total = base_total - base_total * (to_decimal(commission) / HUNDRED)

    profit = client_total - provider_total
    profit_margin = ZERO if client_total == ZERO else profit / client_total * HUNDRED

    return BillingResult(
        base_total=base_total,
        client_total=client_total,
        provider_total=provider_total,
        profit=profit,
        profit_margin=profit_margin,
    )
