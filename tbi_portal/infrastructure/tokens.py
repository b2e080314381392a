"""Token Signer — HS256 JWTs for sessions, mentor action links and password resets.

Invariants:
    - Every token carries purpose, jti, iat, exp; decode() rejects a token issued for another purpose
    - Expiry enforced by the JWT library (exp claim), never by comparing stored timestamps
    - Failures raise InvalidTokenError with reason in {expired, invalid, wrong_purpose}

Design Decisions:
    - One signer, many purposes: a session token can never be replayed as an action link
    - jti doubles as the server-side record id (identity_sessions, email_tokens)
"""

import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta

from jose import ExpiredSignatureError, JWTError, jwt

from tbi_portal.core.errors import InvalidTokenError
from tbi_portal.db.base import utcnow

ALGORITHM = "HS256"

PURPOSE_SESSION = "session"
PURPOSE_MENTOR_ACTION = "mentor_action"
PURPOSE_PASSWORD_RESET = "password_reset"


@dataclass(frozen=True)
class IssuedToken:
    token: str
    jti: str
    expires_at: datetime


class TokenSigner:
    def __init__(self, secret_key: str):
        self._secret_key = secret_key

    def issue(
        self, purpose: str, subject: str, lifetime: timedelta, **claims,
    ) -> IssuedToken:
        now = utcnow()
        jti = secrets.token_urlsafe(24)
        expires_at = now + lifetime
        payload = {
            **claims,
            "sub": subject,
            "purpose": purpose,
            "jti": jti,
            "iat": int(now.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        token = jwt.encode(payload, self._secret_key, algorithm=ALGORITHM)
        return IssuedToken(token=token, jti=jti, expires_at=expires_at)

    def decode(self, token: str, purpose: str, verify_exp: bool = True) -> dict:
        try:
            claims = jwt.decode(
                token, self._secret_key, algorithms=[ALGORITHM],
                options={"verify_exp": verify_exp},
            )
        except ExpiredSignatureError:
            raise InvalidTokenError("This link or session has expired.", "expired")
        except JWTError:
            raise InvalidTokenError("Invalid or malformed token.", "invalid")
        if claims.get("purpose") != purpose or not claims.get("jti"):
            raise InvalidTokenError("Token was not issued for this action.", "wrong_purpose")
        return claims
