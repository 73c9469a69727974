"""Report endpoints: statistics and per-respondent views, computed on request."""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from surveyhub.core.database import get_db
from surveyhub.schemas.statistics import QuestionStatistics, SurveyStatistics, RespondentReport
from surveyhub.services.progress import ProgressService
from surveyhub.services.statistics import StatisticsService

router = APIRouter(prefix="/api/reports", tags=["reports"])


@router.get("/questions/{question_id}", response_model=QuestionStatistics)
def get_question_statistics(question_id: int, publication_id: int, db: Session = Depends(get_db)):
    stats = StatisticsService(db).question_statistics(question_id, publication_id)
    if stats is None:
        raise HTTPException(status_code=404, detail="No responses for this question")
    return stats


@router.get("/surveys/{survey_id}", response_model=SurveyStatistics)
def get_survey_statistics(survey_id: int, publication_id: int, db: Session = Depends(get_db)):
    stats = StatisticsService(db).survey_statistics(survey_id, publication_id)
    if stats is None:
        raise HTTPException(status_code=404, detail="Survey or publication not found")
    return stats


@router.get("/respondents/{respondent_id}", response_model=RespondentReport)
def get_respondent_report(respondent_id: int, publication_id: int, db: Session = Depends(get_db)):
    report = ProgressService(db).report(respondent_id, publication_id)
    if report is None:
        raise HTTPException(status_code=404, detail="Respondent or publication not found")
    return report
