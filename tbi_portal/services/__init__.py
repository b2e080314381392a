"""Services Layer — handler classes that orchestrate IO around core/ checks.

Invariants:
    - One handler class per record family, each taking db: AsyncSession
    - State-changing public methods are guarded (action_guard.reported) and never raise
    - Queries raise PortalError subclasses; the API's global handlers render them

Design Decisions:
    - Collaborators (identity provider, email sender, token signer) injected by api/deps.py
"""
