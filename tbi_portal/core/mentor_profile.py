"""Mentor Profile View — merges the primary mentor record with its detail sub-record.

Invariants:
    - PURE: dicts in, dict out
    - Fallback chain per field: detail value -> primary value -> default
    - Empty strings in the detail record count as "absent" (older edits blanked fields)
    - Identity-linked fields (id, email, status) always come from the primary record
"""

from urllib.parse import quote

PROFILE_FIELDS = (
    "name", "designation", "expertise", "bio", "avatar_url", "linkedin_url",
)
_IDENTITY_FIELDS = ("id", "email", "status", "created_at")


def default_avatar_url(name: str) -> str:
    initials = quote((name or "?")[:2])
    return f"https://placehold.co/100x100/7DF9FF/121212.png?text={initials}"


def merge_profile(primary: dict, detail: dict | None) -> dict:
    detail = detail or {}
    view = {key: primary.get(key) for key in _IDENTITY_FIELDS}
    for key in PROFILE_FIELDS:
        value = detail.get(key)
        if value in (None, ""):
            value = primary.get(key)
        view[key] = value if value not in (None, "") else None
    if not view["avatar_url"]:
        view["avatar_url"] = default_avatar_url(view["name"] or "")
    view["profile_version"] = detail.get("profile_version")
    view["updated_at"] = detail.get("updated_at") or primary.get("updated_at")
    return view
