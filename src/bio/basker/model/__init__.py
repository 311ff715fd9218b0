"""
Data Models

This package defines the records held by the in-memory registries, using Pydantic models. Field names are
snake_case in Python and camelCase on the wire, matching the JSON the Basker client expects.

Key Models:
- base.py: Shared model configuration and timestamp helper
- verification.py: Employment verification requests and their status
- moderation.py: Moderator permission bundles, moderator records, reports and resolutions

Records are mutable: registries hand out the stored object itself, so a caller that holds a record observes later
updates made through the registry.
"""
