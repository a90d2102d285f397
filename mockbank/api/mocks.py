from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from mockbank.core.auth import TokenData, require_roles
from mockbank.core.database import get_db
from mockbank.models.schemas import AnalysisReport, MockCreate, MockOut, SubmissionCreate, SubmissionResult
from mockbank.services.analysis import analyze_submission
from mockbank.services.assembler import assemble_mock
from mockbank.services.mocks import get_mock
from mockbank.services.scorer import submit_mock

router = APIRouter()

student = require_roles("student", "admin")


@router.post("", response_model=MockOut, status_code=201)
def create_mock(payload: MockCreate, user: TokenData = Depends(student), db: Session = Depends(get_db)):
    return assemble_mock(db, payload, user.sub)


@router.get("/{mock_id}", response_model=MockOut)
def read_mock(mock_id: str, user: TokenData = Depends(student), db: Session = Depends(get_db)):
    return get_mock(db, mock_id, user.sub)


@router.post("/{mock_id}/submit", response_model=SubmissionResult, status_code=201)
def submit(mock_id: str, payload: SubmissionCreate, user: TokenData = Depends(student), db: Session = Depends(get_db)):
    return submit_mock(db, mock_id, user.sub, payload.responses)


@router.get("/{mock_id}/analysis", response_model=AnalysisReport)
def analysis(
    mock_id: str,
    submission_id: Optional[str] = Query(default=None),
    user: TokenData = Depends(student),
    db: Session = Depends(get_db),
):
    return analyze_submission(db, mock_id, user.sub, submission_id)
