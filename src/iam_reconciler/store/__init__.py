"""
iam_reconciler.store

Remote policy store boundary.

Responsibilities:
- `PolicyStore` protocol consumed by the orchestrator.
- Cloud Resource Manager implementation over httpx.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Alternative stores (e.g. folder or organization policies) can implement the same protocol.
