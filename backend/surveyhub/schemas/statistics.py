from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime


class ChoiceFrequency(BaseModel):
    choice: str
    count: int
    percentage: float


class QuestionStatistics(BaseModel):
    question_id: int
    question_text: str
    question_type: str
    n: int
    mode: Optional[List[str]] = None
    distribution: Optional[List[ChoiceFrequency]] = None
    mean_value: Optional[float] = None
    raw_texts: Optional[List[str]] = None


class SurveyStatistics(BaseModel):
    survey_id: int
    survey_title: str
    publication_id: int
    publication_name: str
    total_respondents: int
    responded_count: int
    response_rate: float
    per_question: List[QuestionStatistics] = Field(default_factory=list)


class Progress(BaseModel):
    respondent_id: int
    publication_id: int
    total_questions: int
    answered_count: int
    percent_complete: float
    unanswered_question_ids: List[int] = Field(default_factory=list)


class ReportAnswer(BaseModel):
    question_id: int
    question_text: str
    question_type: str
    answer_value: Optional[str] = None
    responded_at: datetime


class RespondentReport(BaseModel):
    respondent_id: int
    display_name: str
    publication_id: int
    answers: List[ReportAnswer] = Field(default_factory=list)
