from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from surveyhub.models.survey import QuestionType


class ChoiceIn(BaseModel):
    text: str
    value: int = 0
    sequence: int = Field(..., ge=1)


class ChoiceOut(ChoiceIn):
    id: int

    class Config:
        from_attributes = True


class ScaleBase(BaseModel):
    title: str
    shareable: bool = False
    choices: List[ChoiceIn] = Field(default_factory=list)


class ScaleCreate(ScaleBase):
    tenant_id: int


class ScaleUpdate(ScaleBase):
    pass


class ScaleOut(BaseModel):
    id: int
    tenant_id: int
    title: str
    shareable: bool
    choices: List[ChoiceOut] = Field(default_factory=list)
    question_count: Optional[int] = None

    class Config:
        from_attributes = True


class QuestionIn(BaseModel):
    question_text: str
    question_type: QuestionType = QuestionType.MULTIPLE_CHOICE
    sequence: int = Field(..., ge=0)
    is_required: bool = False
    scale_id: Optional[int] = None
    max_length: Optional[int] = Field(None, ge=1)


class QuestionOut(BaseModel):
    id: int
    survey_id: int
    question_text: str
    question_type: str
    sequence: int
    is_required: bool
    scale_id: Optional[int] = None
    max_length: Optional[int] = None

    class Config:
        from_attributes = True


class SurveyBase(BaseModel):
    title: str
    description: Optional[str] = None
    questions: List[QuestionIn] = Field(default_factory=list)


class SurveyCreate(SurveyBase):
    tenant_id: int


class SurveyUpdate(SurveyBase):
    pass


class SurveyOut(BaseModel):
    id: int
    tenant_id: int
    title: str
    description: str
    status: str
    questions: List[QuestionOut] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
