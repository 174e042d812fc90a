"""
JOBBOARD Auditor

Ticket producers. Audits read a board's ground-truth inventory on a
fixed cadence and post tickets when something runs low.
"""

from .inventory_audit import InventoryAudit, points_per_tick

__all__ = ["InventoryAudit", "points_per_tick"]
