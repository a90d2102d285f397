"""
Per-user question bookmarks.
"""
import logging

from sqlalchemy.orm import Session

from mockbank.core.database import transaction
from mockbank.core.errors import NotFound
from mockbank.models.orm import Bookmark
from mockbank.models.schemas import BookmarkState
from mockbank.services import question_repository as repo

logger = logging.getLogger(__name__)


def set_bookmark(db: Session, question_id: str, user_id: str, action: str = "toggle") -> BookmarkState:
    """Apply ``add``, ``remove`` or ``toggle`` and return the resulting state.

    ``add`` and ``remove`` are idempotent.
    """
    if repo.get_question(db, question_id) is None:
        raise NotFound("Question not found")

    existing = repo.find_bookmark(db, question_id, user_id)
    want = existing is None if action == "toggle" else action == "add"

    with transaction(db):
        if want and existing is None:
            db.add(Bookmark(user_id=user_id, question_id=question_id))
        elif not want and existing is not None:
            db.delete(existing)

    logger.debug("User %s bookmark on question %s: %s", user_id, question_id, want)
    return BookmarkState(question_id=question_id, is_bookmarked=want)
