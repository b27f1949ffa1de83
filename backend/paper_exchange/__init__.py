"""Paper-trading crypto exchange backend.

Subpackages:
    market  - quotes from upstream, caching, periodic broadcast
    wallet  - balance ledger, market orders, authentication capability
"""

__version__ = "0.1.0"
