"""
Stipend Tracker - Source Package

A financial wellness tracker for students living on a monthly stipend:
a ledger of income and expenses, receipt ingestion, savings goals,
workshop attendance, spending analytics and rule-based advice.

DESIGN PRINCIPLES:
1. The ledger is the single source of truth
2. Everything derived is recomputed from an immutable snapshot
3. Fail early, fail visibly (one named field per rejection)
4. Every mutation is auditable
5. Storage and receipt extraction are swappable
"""

__version__ = "1.0.0"
__author__ = "Stipend Tracker Team"
