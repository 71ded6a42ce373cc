"""
Wallet - Source Package

A minimal personal-finance ledger: accounts keyed by phone number,
payments debited from them, favorite payment templates, and flat-file
snapshots of all three.

DESIGN PRINCIPLES:
1. The ledger is the only owner of state
2. Every refusal is an exception the caller sees
3. Every balance change is audited
4. Snapshot formats are swappable adapters
"""

__version__ = "1.0.0"
