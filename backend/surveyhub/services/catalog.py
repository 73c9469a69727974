import logging
from datetime import datetime
from typing import List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session

from surveyhub.core.config import settings
from surveyhub.core.exceptions import (
    CatalogValidationError,
    InvalidStateError,
    ScaleInUseError,
    ScaleNotFoundError,
    SurveyNotFoundError,
    TenantMismatchError,
)
from surveyhub.core.unit_of_work import UnitOfWork
from surveyhub.models.scale import Scale, Choice
from surveyhub.models.survey import Survey, SurveyStatus, Question, QuestionType
from surveyhub.models.tenant import Tenant
from surveyhub.schemas.catalog import (
    ScaleCreate, ScaleUpdate, ChoiceIn, SurveyCreate, SurveyUpdate, QuestionIn,
)

logger = logging.getLogger(__name__)


class CatalogService:
    """
    Survey and scale templates.

    Rules:
    1. A survey is editable only while it is a draft
    2. Multiple-choice questions must use a scale of the survey's tenant
    3. A scale can't be deleted while any question uses it, and its choices
       can't be replaced once a non-draft survey uses it
    """

    def __init__(self, db: Session):
        self.db = db
        self.uow = UnitOfWork(db)

    # ── Scales ───────────────────────────────────────────────────────

    def get_scale(self, scale_id: int) -> Optional[Scale]:
        return self.db.query(Scale).filter(Scale.id == scale_id).first()

    def list_scales(self, tenant_id: int) -> List[Scale]:
        return (
            self.db.query(Scale)
            .filter(Scale.tenant_id == tenant_id)
            .order_by(Scale.title)
            .all()
        )

    def usage_count(self, scale_id: int) -> int:
        count = (
            self.db.query(func.count(Question.id))
            .filter(Question.scale_id == scale_id)
            .scalar()
        )
        return int(count or 0)

    def create_scale(self, data: ScaleCreate) -> Scale:
        self._require_tenant(data.tenant_id)
        errors = self._validate_title(data.title, "Scale")
        errors += self._validate_choices(data.choices)
        if errors:
            raise CatalogValidationError(errors)

        now = datetime.utcnow()
        scale = Scale(
            tenant_id=data.tenant_id,
            title=data.title.strip(),
            shareable=data.shareable,
            created_at=now,
            updated_at=now,
        )
        scale.choices = [self._new_choice(c) for c in sorted(data.choices, key=lambda c: c.sequence)]

        self.db.add(scale)
        self.uow.commit()
        self.db.refresh(scale)

        logger.info(f"Scale created: id={scale.id}, tenant_id={scale.tenant_id}, choices={len(scale.choices)}")
        return scale

    def update_scale(self, scale_id: int, data: ScaleUpdate) -> Scale:
        scale = self.get_scale(scale_id)
        if not scale:
            raise ScaleNotFoundError(scale_id)

        errors = self._validate_title(data.title, "Scale")
        errors += self._validate_choices(data.choices)
        if errors:
            raise CatalogValidationError(errors)

        if self._is_frozen(scale_id):
            raise ScaleInUseError(scale_id, reason="its choices are frozen by a published survey")

        scale.title = data.title.strip()
        scale.shareable = data.shareable
        scale.updated_at = datetime.utcnow()

        # Old rows must be gone before new ones reuse their sequence numbers
        scale.choices.clear()
        self.db.flush()
        scale.choices = [self._new_choice(c) for c in sorted(data.choices, key=lambda c: c.sequence)]

        self.uow.commit()
        self.db.refresh(scale)
        return scale

    def delete_scale(self, scale_id: int) -> bool:
        scale = self.get_scale(scale_id)
        if not scale:
            raise ScaleNotFoundError(scale_id)

        if self.usage_count(scale_id) > 0:
            raise ScaleInUseError(scale_id)

        self.db.delete(scale)
        self.uow.commit()
        logger.info(f"Scale deleted: id={scale_id}")
        return True

    # ── Surveys ──────────────────────────────────────────────────────

    def get_survey(self, survey_id: int) -> Optional[Survey]:
        return self.db.query(Survey).filter(Survey.id == survey_id).first()

    def list_surveys(self, tenant_id: int, status: Optional[str] = None) -> List[Survey]:
        query = self.db.query(Survey).filter(Survey.tenant_id == tenant_id)
        if status:
            query = query.filter(Survey.status == status)
        return query.order_by(Survey.created_at.desc(), Survey.id.desc()).all()

    def create_survey(self, data: SurveyCreate) -> Survey:
        self._require_tenant(data.tenant_id)
        errors = self._validate_title(data.title, "Survey")

        now = datetime.utcnow()
        survey = Survey(
            tenant_id=data.tenant_id,
            title=(data.title or "").strip(),
            description=data.description or "",
            status=SurveyStatus.DRAFT.value,
            created_at=now,
            updated_at=now,
        )
        survey.questions = self._build_questions(data.tenant_id, data.questions, errors)
        if errors:
            raise CatalogValidationError(errors)

        self.db.add(survey)
        self.uow.commit()
        self.db.refresh(survey)

        logger.info(f"Survey created: id={survey.id}, tenant_id={survey.tenant_id}, questions={len(survey.questions)}")
        return survey

    def update_survey(self, survey_id: int, data: SurveyUpdate) -> Survey:
        """Replace title, description and the full question list of a draft."""
        survey = self._require_draft(survey_id)

        errors = self._validate_title(data.title, "Survey")
        questions = self._build_questions(survey.tenant_id, data.questions, errors)
        if errors:
            raise CatalogValidationError(errors)

        survey.title = data.title.strip()
        survey.description = data.description or ""
        survey.updated_at = datetime.utcnow()
        survey.questions.clear()
        self.db.flush()
        survey.questions = questions

        self.uow.commit()
        self.db.refresh(survey)
        return survey

    def add_question(self, survey_id: int, data: QuestionIn) -> Question:
        survey = self._require_draft(survey_id)

        errors: List[str] = []
        if any(q.sequence == data.sequence for q in survey.questions):
            errors.append(f"Question sequence {data.sequence} is already used in this survey")
        question = self._build_question(survey.tenant_id, data, errors)
        if errors:
            raise CatalogValidationError(errors)

        survey.questions.append(question)
        survey.updated_at = datetime.utcnow()
        self.uow.commit()
        self.db.refresh(question)
        return question

    def archive_survey(self, survey_id: int) -> Survey:
        survey = self.get_survey(survey_id)
        if not survey:
            raise SurveyNotFoundError(survey_id)

        survey.status = SurveyStatus.ARCHIVED.value
        survey.updated_at = datetime.utcnow()
        self.uow.commit()
        logger.info(f"Survey archived: id={survey_id}")
        return survey

    # ── helpers ──────────────────────────────────────────────────────

    def _require_tenant(self, tenant_id: int) -> Tenant:
        tenant = self.db.query(Tenant).filter(Tenant.id == tenant_id).first()
        if not tenant:
            raise CatalogValidationError(f"Tenant {tenant_id} does not exist")
        return tenant

    def _require_draft(self, survey_id: int) -> Survey:
        survey = self.get_survey(survey_id)
        if not survey:
            raise SurveyNotFoundError(survey_id)
        if not survey.is_draft:
            raise InvalidStateError(f"Survey {survey_id} is {survey.status}; only draft surveys can be changed")
        return survey

    def _is_frozen(self, scale_id: int) -> bool:
        used = (
            self.db.query(Question.id)
            .join(Survey, Survey.id == Question.survey_id)
            .filter(Question.scale_id == scale_id, Survey.status != SurveyStatus.DRAFT.value)
            .first()
        )
        return used is not None

    @staticmethod
    def _validate_title(title: Optional[str], what: str) -> List[str]:
        if not title or not title.strip():
            return [f"{what} title is required"]
        return []

    @staticmethod
    def _validate_choices(choices: List[ChoiceIn]) -> List[str]:
        errors = []
        seen = set()
        for choice in choices:
            if not choice.text or not choice.text.strip():
                errors.append("Choice text is required")
            elif len(choice.text) > settings.CHOICE_TEXT_MAX_LENGTH:
                errors.append(f"Choice text cannot exceed {settings.CHOICE_TEXT_MAX_LENGTH} characters")
            if choice.sequence in seen:
                errors.append(f"Choice sequence {choice.sequence} is duplicated")
            seen.add(choice.sequence)
        return errors

    @staticmethod
    def _new_choice(data: ChoiceIn) -> Choice:
        return Choice(text=data.text.strip(), value=data.value, sequence=data.sequence)

    def _build_questions(self, tenant_id: int, items: List[QuestionIn], errors: List[str]) -> List[Question]:
        questions = []
        seen = set()
        for item in sorted(items, key=lambda q: q.sequence):
            if item.sequence in seen:
                errors.append(f"Question sequence {item.sequence} is duplicated")
            seen.add(item.sequence)
            questions.append(self._build_question(tenant_id, item, errors))
        return questions

    def _build_question(self, tenant_id: int, data: QuestionIn, errors: List[str]) -> Question:
        if not data.question_text or not data.question_text.strip():
            errors.append(f"Question text is required (sequence {data.sequence})")

        scale_id = None
        max_length = None
        if data.question_type == QuestionType.MULTIPLE_CHOICE:
            if data.scale_id is None:
                errors.append(f"Multiple-choice question at sequence {data.sequence} needs a scale")
            else:
                scale = self.get_scale(data.scale_id)
                if not scale:
                    errors.append(f"Scale with ID {data.scale_id} was not found")
                elif scale.tenant_id != tenant_id:
                    raise TenantMismatchError(f"Scale {scale.id} belongs to another tenant")
                elif not scale.choices:
                    errors.append(f"Scale {scale.id} has no choices")
                scale_id = data.scale_id
        else:
            max_length = min(data.max_length or settings.FREE_TEXT_MAX_LENGTH, settings.FREE_TEXT_MAX_LENGTH)

        now = datetime.utcnow()
        return Question(
            question_text=(data.question_text or "").strip(),
            question_type=data.question_type.value,
            sequence=data.sequence,
            is_required=data.is_required,
            scale_id=scale_id,
            max_length=max_length,
            created_at=now,
            updated_at=now,
        )
