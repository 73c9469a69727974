"""Survey templates and their questions."""
from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey, Boolean
from sqlalchemy.orm import relationship
from surveyhub.core.database import Base
import enum


class SurveyStatus(str, enum.Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class QuestionType(str, enum.Enum):
    MULTIPLE_CHOICE = "multiple_choice"
    FREE_TEXT = "free_text"


class Survey(Base):
    __tablename__ = "surveys"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")

    # draft -> published -> archived
    status = Column(String, default=SurveyStatus.DRAFT.value, nullable=False, index=True)

    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    questions = relationship(
        "Question",
        order_by="Question.sequence",
        cascade="all, delete-orphan",
    )

    @property
    def is_draft(self) -> bool:
        return self.status == SurveyStatus.DRAFT.value


class Question(Base):
    """
    One prompt of a survey.

    The kind is a tag: multiple_choice questions carry ``scale_id``,
    free_text questions carry ``max_length``.
    """
    __tablename__ = "questions"

    id = Column(Integer, primary_key=True, index=True)
    survey_id = Column(Integer, ForeignKey("surveys.id"), nullable=False, index=True)
    question_text = Column(Text, nullable=False)
    question_type = Column(String, nullable=False)
    sequence = Column(Integer, nullable=False)
    is_required = Column(Boolean, default=False, nullable=False)

    # multiple_choice
    scale_id = Column(Integer, ForeignKey("scales.id"), nullable=True, index=True)
    # free_text
    max_length = Column(Integer, nullable=True)

    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    @property
    def is_multiple_choice(self) -> bool:
        return self.question_type == QuestionType.MULTIPLE_CHOICE.value
