import logging
from datetime import datetime
from typing import List, Optional
from sqlalchemy.orm import Session

from surveyhub.core.exceptions import (
    AlreadyClosedError,
    InvalidStateError,
    PublicationNotFoundError,
    SurveyNotFoundError,
)
from surveyhub.core.unit_of_work import UnitOfWork
from surveyhub.models.publication import Publication, AudienceType
from surveyhub.models.survey import Survey, SurveyStatus

logger = logging.getLogger(__name__)


class PublicationService:
    """
    Publication lifecycle:
    1. Publishing opens a new publication (published_at = now) and moves a
       draft survey to published. A survey may back several publications.
    2. Closing sets closed_at once. There is no re-open.
    3. Responses of a closed publication stay readable for statistics.
    """

    def __init__(self, db: Session):
        self.db = db
        self.uow = UnitOfWork(db)

    def get_publication(self, publication_id: int) -> Optional[Publication]:
        return self.db.query(Publication).filter(Publication.id == publication_id).first()

    def list_publications(self, survey_id: int) -> List[Publication]:
        return (
            self.db.query(Publication)
            .filter(Publication.survey_id == survey_id)
            .order_by(Publication.display_order, Publication.id)
            .all()
        )

    def publish_survey(
        self,
        survey_id: int,
        name: str,
        audience_ref: Optional[str] = None,
        audience_type: AudienceType = AudienceType.SESSION_FEEDBACK,
        display_order: int = 0,
        is_required: bool = False,
    ) -> Publication:
        def work():
            survey = self.db.query(Survey).filter(Survey.id == survey_id).first()
            if not survey:
                raise SurveyNotFoundError(survey_id)

            if survey.status == SurveyStatus.ARCHIVED.value:
                raise InvalidStateError(f"Survey {survey_id} is archived and cannot be published")
            if not survey.questions:
                raise InvalidStateError("Survey must have at least one question before publishing")
            if not name or not name.strip():
                raise InvalidStateError("Publication name is required")
            if display_order < 0:
                raise InvalidStateError("Display order cannot be negative")

            now = datetime.utcnow()
            if survey.status == SurveyStatus.DRAFT.value:
                survey.status = SurveyStatus.PUBLISHED.value
                survey.updated_at = now

            publication = Publication(
                tenant_id=survey.tenant_id,
                survey_id=survey.id,
                name=name.strip(),
                audience_ref=audience_ref,
                audience_type=AudienceType(audience_type).value,
                display_order=display_order,
                is_required=is_required,
                published_at=now,
                created_at=now,
                updated_at=now,
            )
            self.db.add(publication)
            return publication

        publication = self.uow.run(work, attempts=0)
        self.db.refresh(publication)

        logger.info(f"Survey {survey_id} published: publication_id={publication.id}, name={publication.name!r}")
        return publication

    def close_publication(self, publication_id: int) -> bool:
        """
        Close an open publication.

        The closed_at check and write are one conditional UPDATE, so of two
        concurrent callers exactly one succeeds and the other gets
        AlreadyClosedError.
        """
        def work():
            now = datetime.utcnow()
            updated = (
                self.db.query(Publication)
                .filter(Publication.id == publication_id, Publication.closed_at.is_(None))
                .update(
                    {Publication.closed_at: now, Publication.updated_at: now},
                    synchronize_session=False,
                )
            )
            if updated:
                return True

            exists = self.db.query(Publication.id).filter(Publication.id == publication_id).first()
            if not exists:
                raise PublicationNotFoundError(publication_id)
            raise AlreadyClosedError(publication_id)

        closed = self.uow.run(work, attempts=0)
        self.db.expire_all()
        logger.info(f"Publication {publication_id} closed")
        return closed
