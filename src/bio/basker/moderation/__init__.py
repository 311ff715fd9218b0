"""
Moderation Subsystem

Moderation wraps AT Protocol's native reporting primitives rather than running its own review queue.

Key Components:
- registry.py: In-memory moderator records and the per-action permission check for resolving reports
- backend.py: ReportBackend interface, the AT Protocol implementation and a no-op implementation
"""
