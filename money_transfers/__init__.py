"""
Money Transfers

Monetary accounts and atomic transfers of value between them, with
fixed-point Decimal amounts, deadlock-free lock ordering and
all-or-nothing storage units of work.
"""

__version__ = "1.0.0"
