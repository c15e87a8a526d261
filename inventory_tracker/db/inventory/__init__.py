"""
Stock ledger tables.

Models:
- StockByLocation (non-negative quantity per sku per location)
- AuditTrailEntry (append-only record of every add/deduct/transfer)
"""
