from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from surveyhub.core.database import get_db
from surveyhub.schemas.catalog import SurveyCreate, SurveyUpdate, SurveyOut, QuestionIn, QuestionOut
from surveyhub.schemas.publication import PublicationOut
from surveyhub.services.catalog import CatalogService
from surveyhub.services.publication import PublicationService

router = APIRouter(prefix="/api/surveys", tags=["surveys"])


@router.get("", response_model=List[SurveyOut])
def list_surveys(tenant_id: int, status: Optional[str] = None, db: Session = Depends(get_db)):
    """List a tenant's surveys, newest first. Filter by draft/published/archived."""
    return CatalogService(db).list_surveys(tenant_id, status=status)


@router.post("", response_model=SurveyOut, status_code=201)
def create_survey(data: SurveyCreate, db: Session = Depends(get_db)):
    return CatalogService(db).create_survey(data)


@router.get("/{survey_id}", response_model=SurveyOut)
def get_survey(survey_id: int, db: Session = Depends(get_db)):
    survey = CatalogService(db).get_survey(survey_id)
    if not survey:
        raise HTTPException(status_code=404, detail="Survey not found")
    return survey


@router.put("/{survey_id}", response_model=SurveyOut)
def update_survey(survey_id: int, data: SurveyUpdate, db: Session = Depends(get_db)):
    """Replace a draft survey's title, description and questions."""
    return CatalogService(db).update_survey(survey_id, data)


@router.post("/{survey_id}/questions", response_model=QuestionOut, status_code=201)
def add_question(survey_id: int, data: QuestionIn, db: Session = Depends(get_db)):
    return CatalogService(db).add_question(survey_id, data)


@router.post("/{survey_id}/archive", response_model=SurveyOut)
def archive_survey(survey_id: int, db: Session = Depends(get_db)):
    return CatalogService(db).archive_survey(survey_id)


@router.get("/{survey_id}/publications", response_model=List[PublicationOut])
def list_survey_publications(survey_id: int, db: Session = Depends(get_db)):
    if not CatalogService(db).get_survey(survey_id):
        raise HTTPException(status_code=404, detail="Survey not found")
    return PublicationService(db).list_publications(survey_id)
