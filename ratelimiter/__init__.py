"""Per-client rate limiting service.

Four interchangeable in-memory strategies (fixed window, sliding window log,
sliding window counter, token bucket) behind one FastAPI dependency.
"""

__version__ = "0.1.0"
