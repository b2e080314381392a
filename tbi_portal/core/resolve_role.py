"""Role Resolution — maps a verified identity and its user record to an actor role.

Invariants:
    - PURE: no IO; the shell fetches the user record by the identity's account id
    - No identity, no record, inactive record, or email mismatch -> unauthenticated
    - Role comes from the user record's role tag only (no shared admin credential)
"""

from tbi_portal.core.domain_types import AccountStatus, IdentityClaims, Role


def resolve_role(claims: IdentityClaims | None, record: dict | None) -> Role:
    if claims is None or not record:
        return Role.UNAUTHENTICATED

    if record.get("status") != AccountStatus.ACTIVE.value:
        return Role.UNAUTHENTICATED

    record_email = (record.get("email") or "").strip().lower()
    if record_email != claims.email.strip().lower():
        return Role.UNAUTHENTICATED

    try:
        role = Role(record.get("role"))
    except ValueError:
        return Role.UNAUTHENTICATED
    return role


def landing_path(role: Role) -> str | None:
    """Dashboard a freshly signed-in actor is sent to."""
    return {
        Role.ADMIN: "/admin/dashboard",
        Role.MENTOR: "/mentor/dashboard",
        Role.USER: "/user/dashboard",
    }.get(role)
