from typing import Optional
from sqlalchemy.orm import Session

from surveyhub.models.publication import Publication
from surveyhub.models.response import Response
from surveyhub.models.scale import Choice
from surveyhub.models.survey import Question
from surveyhub.schemas.statistics import Progress, ReportAnswer, RespondentReport
from surveyhub.services.respondents import RespondentDirectory
from surveyhub.services.statistics import percentage


class ProgressService:
    """Per-respondent views over one publication's responses."""

    def __init__(self, db: Session, directory: Optional[RespondentDirectory] = None):
        self.db = db
        self.directory = directory or RespondentDirectory(db)

    def _resolve(self, respondent_id: int, publication_id: int):
        publication = self.db.query(Publication).filter(Publication.id == publication_id).first()
        if not publication:
            return None, None
        respondent = self.directory.get_by_id(respondent_id, tenant_id=publication.tenant_id)
        return respondent, publication

    def progress(self, respondent_id: int, publication_id: int) -> Optional[Progress]:
        respondent, publication = self._resolve(respondent_id, publication_id)
        if not respondent or not publication:
            return None

        question_ids = [
            qid for (qid,) in (
                self.db.query(Question.id)
                .filter(Question.survey_id == publication.survey_id)
                .order_by(Question.sequence)
                .all()
            )
        ]
        answered = {
            qid for (qid,) in (
                self.db.query(Response.question_id)
                .filter(Response.respondent_id == respondent_id, Response.publication_id == publication_id)
                .all()
            )
        }
        answered_count = len(answered.intersection(question_ids))

        return Progress(
            respondent_id=respondent_id,
            publication_id=publication_id,
            total_questions=len(question_ids),
            answered_count=answered_count,
            percent_complete=percentage(answered_count, len(question_ids)),
            unanswered_question_ids=[qid for qid in question_ids if qid not in answered],
        )

    def report(self, respondent_id: int, publication_id: int) -> Optional[RespondentReport]:
        respondent, publication = self._resolve(respondent_id, publication_id)
        if not respondent or not publication:
            return None

        rows = (
            self.db.query(Response, Question)
            .join(Question, Question.id == Response.question_id)
            .filter(Response.respondent_id == respondent_id, Response.publication_id == publication_id)
            .order_by(Question.sequence, Question.id)
            .all()
        )

        choice_ids = [r.choice_id for r, _ in rows if r.choice_id is not None]
        labels = {}
        if choice_ids:
            labels = {
                c.id: c.text
                for c in self.db.query(Choice).filter(Choice.id.in_(choice_ids)).all()
            }

        answers = []
        for response, question in rows:
            if question.is_multiple_choice:
                value = labels.get(response.choice_id)
            else:
                value = response.response_text
            answers.append(ReportAnswer(
                question_id=question.id,
                question_text=question.question_text,
                question_type=question.question_type,
                answer_value=value,
                responded_at=response.responded_at,
            ))

        return RespondentReport(
            respondent_id=respondent.id,
            display_name=respondent.display_name,
            publication_id=publication.id,
            answers=answers,
        )
