from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from surveyhub.core.database import get_db
from surveyhub.schemas.publication import PublishRequest, PublicationOut
from surveyhub.services.publication import PublicationService

router = APIRouter(prefix="/api/publications", tags=["publications"])


@router.post("", response_model=PublicationOut, status_code=status.HTTP_201_CREATED)
def publish_survey(data: PublishRequest, db: Session = Depends(get_db)):
    """Publish a survey to an audience. Opens immediately."""
    return PublicationService(db).publish_survey(
        data.survey_id,
        data.name,
        audience_ref=data.audience_ref,
        audience_type=data.audience_type,
        display_order=data.display_order,
        is_required=data.is_required,
    )


@router.get("/{publication_id}", response_model=PublicationOut)
def get_publication(publication_id: int, db: Session = Depends(get_db)):
    publication = PublicationService(db).get_publication(publication_id)
    if not publication:
        raise HTTPException(status_code=404, detail="Publication not found")
    return publication


@router.post("/{publication_id}/close")
def close_publication(publication_id: int, db: Session = Depends(get_db)):
    PublicationService(db).close_publication(publication_id)
    return {"success": True, "message": "Publication closed successfully"}
