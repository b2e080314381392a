"""Startup Catalog — logo fallback and the spreadsheet-row mapping used by bulk import.

Invariants:
    - PURE: dicts in, dicts out
    - A startup without a logo gets a placeholder built from the first three characters of its name
    - Imported rows fill every required field: mapped from the row where a column exists,
      fixed defaults otherwise; the result still goes through StartupCreate validation

Design Decisions:
    - Missing row columns read as "" (never the literal "None") inside the generated description
"""

from urllib.parse import quote

IMPORT_COLUMNS = (
    "Startup Name",
    "Founder Details",
    "Incubation Stage",
    "Legal Registration Type",
    "Funding Support",
    "Recognition",
    "Business Category & Industry",
    "Contact Information",
)

IMPORT_DEFAULTS = {
    "funnel_source": "Direct Application",
    "session": "2024-25",
    "month_year_of_incubation": "January 2024",
    "rknec_email_id": "contact@rknec.edu",
    "mobile_number": "9876543210",
}


def placeholder_logo_url(name: str) -> str:
    return f"https://placehold.co/300x150/1A1A1A/FFFFFF.png?text={quote((name or '')[:3])}"


def resolve_logo_url(name: str, logo_url: str | None) -> str:
    return logo_url or placeholder_logo_url(name)


def startup_fields_from_row(row: dict) -> dict:
    """Map one imported table row onto startup fields (unvalidated)."""
    cells = {column: str(row.get(column) or "").strip() for column in IMPORT_COLUMNS}
    name = cells["Startup Name"] or "Unknown Startup"
    description = (
        f"Startup: {cells['Startup Name']}. "
        f"Founded by: {cells['Founder Details']}. "
        f"Incubation Stage: {cells['Incubation Stage']}. "
        f"Legal Type: {cells['Legal Registration Type']}. "
        f"Funding: {cells['Funding Support']}. "
        f"Recognition: {cells['Recognition']}. "
        f"Category: {cells['Business Category & Industry']}. "
        f"Contact: {cells['Contact Information']}."
    )
    return {
        "name": name,
        "logo_url": placeholder_logo_url(name),
        "description": description,
        "badge_text": cells["Business Category & Industry"] or "General",
        "website_url": "",
        "status": cells["Incubation Stage"] or "Active",
        "legal_status": cells["Legal Registration Type"] or "Not Registered",
        "email_id": cells["Contact Information"] or "contact@startup.com",
        **IMPORT_DEFAULTS,
    }


def import_summary(imported: int, failed: int) -> tuple[bool, str]:
    """(success, message) for a finished import."""
    if failed:
        return False, (
            f"Import completed with {imported} successful imports and {failed} errors."
        )
    return True, f"Successfully imported {imported} startups."
