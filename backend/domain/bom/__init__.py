"""
BOM Domain - Bill of Materials baselines.

A BOM snapshot is derived from exactly one configuration snapshot when an
order is confirmed (or revised after an amendment):
- one BOM item per included configuration item
- cost figures copied from the snapshot, never recomputed
- estimated vs actual cost classification per item
"""
