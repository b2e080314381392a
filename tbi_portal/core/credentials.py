"""Temporary Credentials — random passwords issued to newly accepted applicants.

Invariants:
    - Generated from `secrets` (CSPRNG), alphanumeric only, fixed length
    - Always contains at least one letter and one digit
"""

import secrets
import string

TEMPORARY_PASSWORD_LENGTH = 10
_ALPHABET = string.ascii_letters + string.digits


def generate_temporary_password(length: int = TEMPORARY_PASSWORD_LENGTH) -> str:
    if length < 2:
        raise ValueError("temporary password length must be >= 2")
    while True:
        candidate = "".join(secrets.choice(_ALPHABET) for _ in range(length))
        if any(c.isalpha() for c in candidate) and any(c.isdigit() for c in candidate):
            return candidate
