"""
Budget Reçus - Source Package

Monthly card budgets with automatic rollover, fed by manually entered
expenses or by photographed receipts read with local OCR.

DESIGN PRINCIPLES:
1. OCR proposes → Human reviews → Ledger commits
2. Invalid input is rejected whole, never half-applied
3. Balances are recomputed from stored data, never cached across edits
4. Storage and OCR are swappable collaborators
"""

__version__ = "1.0.0"
