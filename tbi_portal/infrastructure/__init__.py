"""Infrastructure Layer — external service clients and cross-cutting concerns.

Invariants:
    - Infrastructure implements the Protocols in core/repository_protocols.py
    - External failures mapped to core/errors.py types or returned as DeliveryReport

Design Decisions:
    - No automatic retries: every external call is attempted at most once per operation
"""
