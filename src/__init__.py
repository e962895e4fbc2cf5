"""
Expense Tracker - Source Package

A client-side income/expense tracker. Authentication and persistence
are delegated to external collaborators; this package holds the
transaction state model and everything derived from it.

DESIGN PRINCIPLES:
1. The in-memory ledger only mirrors what the backend confirmed
2. Derived views are pure functions of a snapshot
3. Collaborator failures become messages, never crashes
4. One request in flight per user action
5. Storage and identity backends are swappable
"""

__version__ = "1.0.0"
__author__ = "Expense Tracker Team"
