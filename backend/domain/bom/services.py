"""
BOM Domain - Services.

Generation of BOM snapshots from configuration snapshots, and the cost
analytics shown next to them.
"""

from __future__ import annotations
from collections import OrderedDict
from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import UUID

from domain.project.entities import ConfigurationSnapshot
from domain.shared.value_objects import BOMStatus, percent, round_money, round_to, to_decimal

from .entities import BOMItem, BOMSnapshot


HIGH_ESTIMATION_THRESHOLD = 30


def generate_bom_snapshot(
    snapshot: ConfigurationSnapshot,
    snapshot_number: int,
    estimation_ratio: Decimal,
    created_by: Optional[str] = None,
    status: BOMStatus = BOMStatus.BASELINE,
) -> BOMSnapshot:
    """
    Derive a BOM from a configuration snapshot.
    
    Reads only ``snapshot.data``; the live configuration is never consulted.
    Unit and line costs are copied as they were priced on the snapshot.
    """
    items: List[BOMItem] = []
    for config_item in snapshot.data.included_items:
        items.append(BOMItem(
            configuration_item_id=config_item.id,
            category=config_item.category,
            article_number=config_item.article_number,
            name=config_item.name,
            description=config_item.description,
            quantity=config_item.quantity,
            unit=config_item.unit,
            unit_cost=config_item.unit_cost,
            total_cost=config_item.line_cost,
            is_estimated=config_item.is_cost_estimated,
            estimation_ratio=estimation_ratio if config_item.is_cost_estimated else None,
            sell_price=config_item.unit_price_excl_vat,
            supplier=config_item.supplier,
            lead_time_days=config_item.lead_time_days,
        ))
    
    estimated = [item for item in items if item.is_estimated]
    total_cost = round_money(sum((item.total_cost for item in items), Decimal("0")))
    estimated_total = round_money(sum((item.total_cost for item in estimated), Decimal("0")))
    
    return BOMSnapshot(
        project_id=snapshot.project_id,
        snapshot_number=snapshot_number,
        configuration_snapshot_id=snapshot.id,
        items=items,
        total_parts=sum((item.quantity for item in items), Decimal("0")),
        total_cost_excl_vat=total_cost,
        estimated_cost_count=len(estimated),
        estimated_cost_total=estimated_total,
        actual_cost_total=round_money(total_cost - estimated_total),
        cost_estimation_ratio=to_decimal(estimation_ratio),
        status=status,
        created_by=created_by,
    )


def get_estimation_summary(bom: BOMSnapshot) -> Dict[str, Any]:
    total_items = len(bom.items)
    estimated_value_percent = percent(bom.estimated_cost_total, bom.total_cost_excl_vat)
    return {
        "total_items": total_items,
        "estimated_count": bom.estimated_cost_count,
        "estimated_percent": percent(bom.estimated_cost_count, total_items),
        "estimated_value": bom.estimated_cost_total,
        "estimated_value_percent": estimated_value_percent,
        "actual_value": bom.actual_cost_total,
        "ratio": bom.cost_estimation_ratio,
        "is_high_estimation": estimated_value_percent > HIGH_ESTIMATION_THRESHOLD,
    }


def get_cost_summary_by_category(bom: BOMSnapshot) -> List[Dict[str, Any]]:
    totals: "OrderedDict[str, Dict[str, Decimal]]" = OrderedDict()
    for item in bom.items:
        bucket = totals.setdefault(item.category, {"cost": Decimal("0"), "estimated_cost": Decimal("0")})
        bucket["cost"] += item.total_cost
        if item.is_estimated:
            bucket["estimated_cost"] += item.total_cost
    
    total = bom.total_cost_excl_vat
    summary = [
        {
            "category": category,
            "cost": round_money(bucket["cost"]),
            "percentage": round_to(bucket["cost"] * 100 / total, 1) if total > 0 else Decimal("0"),
            "estimated_cost": round_money(bucket["estimated_cost"]),
        }
        for category, bucket in totals.items()
    ]
    return sorted(summary, key=lambda row: row["cost"], reverse=True)


def get_critical_path_items(bom: BOMSnapshot, limit: int = 5) -> List[BOMItem]:
    """Items with the longest supplier lead times."""
    with_lead_time = [item for item in bom.items if item.lead_time_days and item.lead_time_days > 0]
    return sorted(with_lead_time, key=lambda item: item.lead_time_days, reverse=True)[:limit]


def calculate_margin(sell_price: Decimal, bom: BOMSnapshot) -> Dict[str, Any]:
    cost = bom.total_cost_excl_vat
    margin = round_money(sell_price - cost)
    return {
        "sell_price": sell_price,
        "cost": cost,
        "margin": margin,
        "margin_percent": round_to(margin * 100 / sell_price, 1) if sell_price > 0 else Decimal("0"),
        "estimated_cost_percent": percent(bom.estimated_cost_total, cost),
    }
