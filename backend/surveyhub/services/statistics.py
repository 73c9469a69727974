import logging
from collections import Counter
from typing import Optional
from sqlalchemy import func
from sqlalchemy.orm import Session

from surveyhub.models.publication import Publication
from surveyhub.models.respondent import Respondent
from surveyhub.models.response import Response
from surveyhub.models.scale import Choice
from surveyhub.models.survey import Survey, Question
from surveyhub.schemas.statistics import ChoiceFrequency, QuestionStatistics, SurveyStatistics
from surveyhub.services.respondents import RespondentDirectory

logger = logging.getLogger(__name__)


def percentage(part: int, whole: int) -> float:
    """part * 100 / whole rounded to 2 places; 0 when whole is 0."""
    if whole <= 0:
        return 0.0
    return round(part * 100.0 / whole, 2)


class StatisticsService:
    """
    On-demand aggregation over persisted responses.

    Multiple-choice questions get a distribution sorted by count (ties by
    choice sequence) and a mode that keeps every tied winner. Free-text
    questions return the raw texts in submission order.
    """

    def __init__(self, db: Session, directory: Optional[RespondentDirectory] = None):
        self.db = db
        self.directory = directory or RespondentDirectory(db)

    def question_statistics(self, question_id: int, publication_id: int) -> Optional[QuestionStatistics]:
        responses = (
            self.db.query(Response)
            .filter(Response.question_id == question_id, Response.publication_id == publication_id)
            .order_by(Response.id)
            .all()
        )
        if not responses:
            return None

        question = self.db.query(Question).filter(Question.id == question_id).first()
        n = len(responses)
        stats = QuestionStatistics(
            question_id=question.id,
            question_text=question.question_text,
            question_type=question.question_type,
            n=n,
        )

        if not question.is_multiple_choice:
            stats.raw_texts = [r.response_text or "" for r in responses]
            return stats

        counts = Counter(r.choice_id for r in responses)
        choices = {
            c.id: c
            for c in self.db.query(Choice).filter(Choice.id.in_(list(counts))).all()
        }

        ranked = sorted(
            counts.items(),
            key=lambda item: (-item[1], choices[item[0]].sequence, item[0]),
        )
        stats.distribution = [
            ChoiceFrequency(choice=choices[choice_id].text, count=count, percentage=percentage(count, n))
            for choice_id, count in ranked
        ]

        top = ranked[0][1]
        stats.mode = [choices[choice_id].text for choice_id, count in ranked if count == top]
        stats.mean_value = round(
            sum(choices[choice_id].value * count for choice_id, count in ranked) / n, 2
        )
        return stats

    def survey_statistics(self, survey_id: int, publication_id: int) -> Optional[SurveyStatistics]:
        survey = self.db.query(Survey).filter(Survey.id == survey_id).first()
        if not survey:
            return None

        publication = self.db.query(Publication).filter(Publication.id == publication_id).first()
        if not publication or publication.survey_id != survey_id:
            return None

        total = self.directory.count_eligible(survey.tenant_id)
        # Same eligibility as total_respondents, so the rate never exceeds 100
        responded = (
            self.db.query(func.count(func.distinct(Response.respondent_id)))
            .select_from(Response)
            .join(Respondent, Respondent.id == Response.respondent_id)
            .filter(
                Response.publication_id == publication_id,
                Respondent.tenant_id == survey.tenant_id,
                Respondent.is_active == True,
            )
            .scalar()
        ) or 0

        per_question = []
        for question in survey.questions:
            stat = self.question_statistics(question.id, publication_id)
            if stat is not None:
                per_question.append(stat)

        logger.debug(f"Survey statistics computed: survey_id={survey_id}, publication_id={publication_id}")
        return SurveyStatistics(
            survey_id=survey.id,
            survey_title=survey.title,
            publication_id=publication.id,
            publication_name=publication.name,
            total_respondents=total,
            responded_count=int(responded),
            response_rate=percentage(int(responded), total),
            per_question=per_question,
        )
