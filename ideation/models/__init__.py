"""
Ideation platform – SQLAlchemy ORM models package.

Imports all model classes so the app can discover them through a single
``from ideation.models import *`` import.
"""

from ideation.models.player import Player, PlayerDetails  # noqa: F401
from ideation.models.invite import InvitedPlayer          # noqa: F401
from ideation.models.idea import Idea                     # noqa: F401
from ideation.models.comment import Comment               # noqa: F401
from ideation.models.evaluation import Evaluation         # noqa: F401
from ideation.models.vote import Vote                     # noqa: F401
from ideation.models.notification import Notification    # noqa: F401
from ideation.models.audit_log import AuditLog            # noqa: F401
from ideation.models.closing_date import ClosingDate      # noqa: F401
