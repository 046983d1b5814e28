"""
Chamaa Ledger - Source Package

Keeps the books of a savings group ("chamaa"): the admins who run groups,
the members who join them and the contributions members pay in.

DESIGN PRINCIPLES:
1. Check every reference before writing anything
2. Fail early, fail visibly
3. Server-assigned ids and timestamps are never caller-controlled
4. Every committed or rejected operation is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Chamaa Ledger Team"
