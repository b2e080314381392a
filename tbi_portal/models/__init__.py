"""ORM Models — SQLAlchemy declarative models for all portal records.

Invariants:
    - All models inherit from Base (db/base.py)
    - Ids are strings (uuid4 or identity-provider account ids)

Design Decisions:
    - One file per record type for locality
    - All models imported here so Base.metadata is complete before create_all / Alembic autogenerate
"""

from tbi_portal.models.submission import Submission  # noqa: F401
from tbi_portal.models.user_account import UserAccount  # noqa: F401
from tbi_portal.models.mentor import Mentor, MentorProfileDetail  # noqa: F401
from tbi_portal.models.mentor_request import MentorRequest  # noqa: F401
from tbi_portal.models.notification import Notification  # noqa: F401
from tbi_portal.models.email_token import EmailToken  # noqa: F401
from tbi_portal.models.identity import Identity, IdentitySessionRecord  # noqa: F401
from tbi_portal.models.startup import Startup  # noqa: F401
from tbi_portal.models.event import Event  # noqa: F401
