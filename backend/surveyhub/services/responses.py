import logging
from datetime import datetime
from typing import Dict, List, Optional
from sqlalchemy.orm import Session

from surveyhub.core.config import settings
from surveyhub.core.exceptions import (
    ErrorKind,
    NotFoundError,
    PublicationClosedError,
    PublicationNotFoundError,
    RespondentNotFoundError,
    StateConflictError,
)
from surveyhub.core.unit_of_work import UnitOfWork
from surveyhub.models.publication import Publication
from surveyhub.models.response import Response
from surveyhub.models.scale import Choice
from surveyhub.models.survey import Question
from surveyhub.schemas.response import AnswerIn, SubmissionResult
from surveyhub.services.respondents import RespondentDirectory

logger = logging.getLogger(__name__)


def _as_choice_id(value) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        # isdigit() also accepts superscripts and other non-ASCII digits int() rejects
        if text.isascii() and text.isdigit():
            return int(text)
    return None


class ResponseSubmissionService:
    """
    Validates a respondent's answers against an open publication and upserts
    them, one response per (respondent, question, publication).

    Not-found and closed publications short-circuit. Missing required answers
    reject the whole submission before anything is written. Invalid answers
    are reported and skipped while the valid ones are saved, all in one
    transaction.
    """

    def __init__(self, db: Session, directory: Optional[RespondentDirectory] = None):
        self.db = db
        self.directory = directory or RespondentDirectory(db)
        self.uow = UnitOfWork(db)

    def submit(self, publication_id: int, respondent_id: int, answers: List[AnswerIn]) -> SubmissionResult:
        try:
            result = self.uow.run(
                lambda: self._submit(publication_id, respondent_id, answers),
                attempts=settings.SUBMISSION_RETRY_ATTEMPTS,
            )
        except (NotFoundError, StateConflictError) as e:
            logger.warning(
                f"Submission rejected: publication_id={publication_id}, "
                f"respondent_id={respondent_id}, reason={e.code}"
            )
            return SubmissionResult.rejected(e)

        if result.accepted:
            logger.info(
                f"Submission accepted: publication_id={publication_id}, "
                f"respondent_id={respondent_id}, answers={result.saved_count}"
            )
        else:
            logger.warning(
                f"Submission failed validation: publication_id={publication_id}, "
                f"respondent_id={respondent_id}, errors={len(result.errors)}, saved={result.saved_count}"
            )
        return result

    def _submit(self, publication_id: int, respondent_id: int, answers: List[AnswerIn]) -> SubmissionResult:
        respondent = self.directory.get_by_id(respondent_id)
        if not respondent:
            raise RespondentNotFoundError(respondent_id)

        publication = self.db.query(Publication).filter(Publication.id == publication_id).first()
        if not publication:
            raise PublicationNotFoundError(publication_id)

        # Respondents of another tenant don't exist as far as this publication is concerned
        if respondent.tenant_id != publication.tenant_id:
            raise RespondentNotFoundError(respondent_id)

        now = datetime.utcnow()
        if not publication.is_open_at(now):
            raise PublicationClosedError(publication_id)

        questions = (
            self.db.query(Question)
            .filter(Question.survey_id == publication.survey_id)
            .order_by(Question.sequence)
            .all()
        )
        questions_by_id = {q.id: q for q in questions}

        # Required questions
        errors: List[str] = []
        answered_ids = {a.question_id for a in answers}
        for question in questions:
            if question.is_required and question.id not in answered_ids:
                errors.append(f"Required question not answered: {question.question_text} (question {question.id})")

        if errors:
            return SubmissionResult(
                accepted=False,
                errors=errors,
                error_kind=ErrorKind.VALIDATION,
                error_code="missing_required_answers",
            )

        choices_by_scale = self._load_choices(questions)

        # Validate and upsert. A repeated question id in one submission: last one wins.
        pending: Dict[int, Response] = {}
        for answer in answers:
            question = questions_by_id.get(answer.question_id)
            if question is None:
                errors.append(f"Invalid question ID: {answer.question_id}")
                continue

            choice_id = None
            text = None
            if question.is_multiple_choice:
                choice_id = _as_choice_id(answer.value)
                if choice_id is None or choice_id not in choices_by_scale.get(question.scale_id, {}):
                    errors.append(f"Invalid answer for question: {question.question_text} (question {question.id})")
                    continue
            else:
                text = "" if answer.value is None else str(answer.value).strip()
                max_length = question.max_length or settings.FREE_TEXT_MAX_LENGTH
                if not text or len(text) > max_length:
                    errors.append(f"Invalid answer for question: {question.question_text} (question {question.id})")
                    continue

            response = pending.get(question.id) or self._find_response(respondent.id, question.id, publication.id)
            if response is None:
                response = Response(
                    tenant_id=publication.tenant_id,
                    publication_id=publication.id,
                    respondent_id=respondent.id,
                    question_id=question.id,
                    created_at=now,
                )
                self.db.add(response)

            response.choice_id = choice_id
            response.response_text = text
            response.responded_at = now
            pending[question.id] = response

        return SubmissionResult(
            accepted=not errors,
            errors=errors,
            error_kind=ErrorKind.VALIDATION if errors else None,
            error_code="invalid_answers" if errors else None,
            saved_count=len(pending),
        )

    def _find_response(self, respondent_id: int, question_id: int, publication_id: int) -> Optional[Response]:
        return (
            self.db.query(Response)
            .filter(
                Response.respondent_id == respondent_id,
                Response.question_id == question_id,
                Response.publication_id == publication_id,
            )
            .first()
        )

    def _load_choices(self, questions: List[Question]) -> Dict[int, Dict[int, Choice]]:
        scale_ids = {q.scale_id for q in questions if q.is_multiple_choice and q.scale_id}
        if not scale_ids:
            return {}
        by_scale: Dict[int, Dict[int, Choice]] = {}
        for choice in self.db.query(Choice).filter(Choice.scale_id.in_(scale_ids)).all():
            by_scale.setdefault(choice.scale_id, {})[choice.id] = choice
        return by_scale
