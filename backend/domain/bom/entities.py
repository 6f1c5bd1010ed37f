"""
BOM Domain - Entities.

BOMItem is a single costed line of a BOM snapshot.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from domain.shared.base_entity import Entity
from domain.shared.value_objects import BOMStatus


@dataclass(eq=False)
class BOMItem(Entity):
    """
    A single costed item in a BOM snapshot.
    
    ``is_estimated`` marks items whose unit cost was derived from the sell
    price by the estimation ratio rather than from a known cost price.
    """
    
    configuration_item_id: Optional[UUID] = None
    category: str = ""
    article_number: Optional[str] = None
    name: str = ""
    description: Optional[str] = None
    
    quantity: Decimal = Decimal("1")
    unit: str = "pcs"
    unit_cost: Decimal = Decimal("0")
    total_cost: Decimal = Decimal("0")
    
    is_estimated: bool = False
    estimation_ratio: Optional[Decimal] = None
    sell_price: Decimal = Decimal("0")
    
    supplier: Optional[str] = None
    lead_time_days: Optional[int] = None


@dataclass(eq=False)
class BOMSnapshot(Entity):
    """Immutable bill-of-materials baseline tied to one configuration snapshot."""
    
    project_id: Optional[UUID] = None
    snapshot_number: int = 1
    configuration_snapshot_id: Optional[UUID] = None
    items: List[BOMItem] = field(default_factory=list)
    
    total_parts: Decimal = Decimal("0")
    total_cost_excl_vat: Decimal = Decimal("0")
    estimated_cost_count: int = 0
    estimated_cost_total: Decimal = Decimal("0")
    actual_cost_total: Decimal = Decimal("0")
    cost_estimation_ratio: Decimal = Decimal("0.6")
    
    status: BOMStatus = BOMStatus.BASELINE
    created_by: Optional[str] = None
