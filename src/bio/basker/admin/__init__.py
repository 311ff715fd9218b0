"""
Admin Subsystem

- gate.py: Static admin capability gate keyed by DID
- verification.py: In-memory registry of employment verification requests

The gate is consulted by the route layer before any verification review. The registry itself performs no
authorization checks.
"""
