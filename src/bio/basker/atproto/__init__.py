"""
AT Protocol Integration

This package holds the few XRPC calls the Basker server makes itself. Everything else (reading and writing profile
records) happens in the browser against the user's own PDS.

Key Components:
- pds.py: createSession, resolveHandle, getProfile and createReport calls
- session.py: Lazily authenticated admin session used for moderation reports

Upstream failures raise UpstreamException with the upstream error message, and are never retried.
"""
