"""
PeerPay - Source Package

A peer-to-peer payments demo: send money, split requests across groups,
and simulate receipt scans against a locally persisted ledger.

DESIGN PRINCIPLES:
1. The ledger is an explicit object owned by the session, never a singleton
2. Invalid user input is a no-op, not a crash
3. Corrupt persisted data never takes the app down
4. Every mutation is audited
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "PeerPay Team"
