from pydantic import BaseModel, Field
from typing import List, Optional, Union


class AnswerIn(BaseModel):
    """A choice id for multiple-choice questions, the text for free-text ones."""
    question_id: int
    value: Union[int, str, None] = None


class SubmitRequest(BaseModel):
    publication_id: int
    respondent_id: int
    answers: List[AnswerIn] = Field(default_factory=list)


class SubmissionResult(BaseModel):
    accepted: bool
    errors: List[str] = Field(default_factory=list)
    # Set when the submission was rejected: not_found | state_conflict | validation
    error_kind: Optional[str] = None
    error_code: Optional[str] = None
    saved_count: int = 0

    @classmethod
    def rejected(cls, exc) -> "SubmissionResult":
        return cls(accepted=False, errors=[exc.message], error_kind=exc.kind, error_code=exc.code)
