"""
iam_reconciler.api

HTTP layer (FastAPI).
"""

# Package marker.
