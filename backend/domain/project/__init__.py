"""
Project Domain - the boat-building project lifecycle.

This domain handles:
- The lifecycle status machine and its milestone effects
- The live configuration and its pricing
- Configuration snapshots, quotes and amendments
- Business rules gating every mutating operation
"""
