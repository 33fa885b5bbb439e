"""
Expense Ledger - Source Package

A reactive expense ledger with budget analytics for a single user.

DESIGN PRINCIPLES:
1. One state container, changed only through dispatched actions
2. Every remote call has a visible pending/success/failure lifecycle
3. Analytics are pure functions of the ledger - never cached
4. Fail visibly: one error message, no silent retries
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Expense Ledger Team"
