"""NewsLive — real-time news article portal backend.

REST API over a Redis-backed article store, bearer-session auth,
and live push of newly published articles to connected browsers.
"""

__version__ = "0.1.0"
