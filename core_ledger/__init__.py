"""
Core Ledger

Account balances and atomic fund transfers with exact Decimal arithmetic,
ordered row locking and all-or-nothing units of work.
"""

__version__ = "1.0.0"
