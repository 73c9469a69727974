from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from surveyhub.core.database import get_db
from surveyhub.core.exceptions import ErrorKind
from surveyhub.schemas.response import SubmitRequest, SubmissionResult
from surveyhub.schemas.statistics import Progress
from surveyhub.services.progress import ProgressService
from surveyhub.services.responses import ResponseSubmissionService

router = APIRouter(prefix="/api/responses", tags=["responses"])


@router.post("", response_model=SubmissionResult)
def submit_responses(data: SubmitRequest, db: Session = Depends(get_db)):
    """
    Submit a respondent's answers to an open publication.

    Re-submitting a question overwrites the earlier answer. Rejected
    submissions come back with the full error list.
    """
    result = ResponseSubmissionService(db).submit(data.publication_id, data.respondent_id, data.answers)
    if result.accepted:
        return result

    status_code = 404 if result.error_kind == ErrorKind.NOT_FOUND else 400
    return JSONResponse(status_code=status_code, content=result.model_dump())


@router.get("/progress", response_model=Progress)
def get_progress(respondent_id: int, publication_id: int, db: Session = Depends(get_db)):
    progress = ProgressService(db).progress(respondent_id, publication_id)
    if progress is None:
        raise HTTPException(status_code=404, detail="Respondent or publication not found")
    return progress
