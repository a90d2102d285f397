from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from mockbank.core.auth import TokenData, require_roles
from mockbank.core.database import get_db
from mockbank.models.schemas import AttemptCreate, AttemptResult, BookmarkState, BookmarkUpdate
from mockbank.services.bookmarks import set_bookmark
from mockbank.services.practice import record_attempt

router = APIRouter()

student = require_roles("student", "admin")


@router.post("/{question_id}/attempt", response_model=AttemptResult, status_code=201)
def attempt_question(
    question_id: str,
    payload: AttemptCreate,
    user: TokenData = Depends(student),
    db: Session = Depends(get_db),
):
    return record_attempt(db, question_id, user.sub, payload)


@router.post("/{question_id}/bookmark", response_model=BookmarkState)
def bookmark_question(
    question_id: str,
    payload: Optional[BookmarkUpdate] = None,
    user: TokenData = Depends(student),
    db: Session = Depends(get_db),
):
    action = payload.action if payload is not None else "toggle"
    return set_bookmark(db, question_id, user.sub, action)
