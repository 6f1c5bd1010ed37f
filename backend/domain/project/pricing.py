"""
Project Domain - Pricing.

Line and configuration totals. The functions are pure; the caller applies
the resulting figures to the configuration it owns.
"""

from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from domain.shared.value_objects import Number, round_money, to_decimal

from .entities import ConfigurationItem, ProjectConfiguration


DEFAULT_VAT_RATE = Decimal("21")
DEFAULT_COST_ESTIMATION_RATIO = Decimal("0.6")


@dataclass(frozen=True)
class PricingTotals:
    subtotal_excl_vat: Decimal
    discount_percent: Decimal
    discount_amount: Decimal
    total_excl_vat: Decimal
    vat_rate: Decimal
    vat_amount: Decimal
    total_incl_vat: Decimal


def line_total(quantity: Number, unit_price: Number) -> Decimal:
    return round_money(to_decimal(quantity) * to_decimal(unit_price))


def price_item(
    item: ConfigurationItem,
    estimation_ratio: Number = DEFAULT_COST_ESTIMATION_RATIO,
) -> ConfigurationItem:
    """
    Fill in sell and cost figures for a single item.

    Without a known cost price the unit cost is estimated as a fixed share
    of the sell price and the item is flagged as estimated.
    """
    item.quantity = to_decimal(item.quantity)
    item.unit_price_excl_vat = round_money(item.unit_price_excl_vat)
    item.line_total_excl_vat = line_total(item.quantity, item.unit_price_excl_vat)

    if item.cost_price is not None:
        item.cost_price = round_money(item.cost_price)
        item.unit_cost = item.cost_price
        item.is_cost_estimated = False
    else:
        item.unit_cost = round_money(item.unit_price_excl_vat * to_decimal(estimation_ratio))
        item.is_cost_estimated = True
    item.line_cost = line_total(item.quantity, item.unit_cost)
    return item


def calculate_totals(
    items: Iterable[ConfigurationItem],
    discount_percent: Number = 0,
    vat_rate: Number = DEFAULT_VAT_RATE,
) -> PricingTotals:
    subtotal = sum(
        (item.line_total_excl_vat for item in items if item.is_included),
        Decimal("0"),
    )
    return totals_for_subtotal(subtotal, discount_percent, vat_rate)


def totals_for_subtotal(
    subtotal: Number,
    discount_percent: Number = 0,
    vat_rate: Number = DEFAULT_VAT_RATE,
) -> PricingTotals:
    discount_percent = to_decimal(discount_percent)
    vat_rate = to_decimal(vat_rate)
    subtotal = round_money(subtotal)
    discount_amount = round_money(subtotal * discount_percent / 100)
    total_excl_vat = round_money(subtotal - discount_amount)
    vat_amount = round_money(total_excl_vat * vat_rate / 100)

    return PricingTotals(
        subtotal_excl_vat=subtotal,
        discount_percent=discount_percent,
        discount_amount=discount_amount,
        total_excl_vat=total_excl_vat,
        vat_rate=vat_rate,
        vat_amount=vat_amount,
        total_incl_vat=round_money(total_excl_vat + vat_amount),
    )


def apply_totals(configuration: ProjectConfiguration, totals: PricingTotals) -> None:
    configuration.subtotal_excl_vat = totals.subtotal_excl_vat
    configuration.discount_percent = totals.discount_percent
    configuration.discount_amount = totals.discount_amount
    configuration.total_excl_vat = totals.total_excl_vat
    configuration.vat_rate = totals.vat_rate
    configuration.vat_amount = totals.vat_amount
    configuration.total_incl_vat = totals.total_incl_vat


def recalculate(configuration: ProjectConfiguration) -> PricingTotals:
    totals = calculate_totals(
        configuration.items,
        configuration.discount_percent,
        configuration.vat_rate,
    )
    apply_totals(configuration, totals)
    return totals
