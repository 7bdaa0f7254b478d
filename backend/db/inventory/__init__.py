"""
Inventory projection (one row, four size buckets).

Models:
- InventoryStock (current stock per bucket, plus total)

The row is never written directly by the API; collections and sales in
db.ledger move it through core.inventory.
"""

from .stock import INVENTORY_ROW_ID, InventoryStock

__all__ = ["INVENTORY_ROW_ID", "InventoryStock"]
