from typing import List
from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from surveyhub.core.database import get_db
from surveyhub.schemas.catalog import ScaleCreate, ScaleUpdate, ScaleOut
from surveyhub.services.catalog import CatalogService

router = APIRouter(prefix="/api/scales", tags=["scales"])


def _scale_out(service: CatalogService, scale, include_usage: bool = False) -> ScaleOut:
    out = ScaleOut.model_validate(scale)
    if include_usage:
        out.question_count = service.usage_count(scale.id)
    return out


@router.post("", response_model=ScaleOut, status_code=status.HTTP_201_CREATED)
def create_scale(data: ScaleCreate, db: Session = Depends(get_db)):
    """Create a scale with its choices."""
    service = CatalogService(db)
    return _scale_out(service, service.create_scale(data))


@router.get("", response_model=List[ScaleOut])
def list_scales(tenant_id: int, include_usage: bool = False, db: Session = Depends(get_db)):
    service = CatalogService(db)
    return [_scale_out(service, s, include_usage) for s in service.list_scales(tenant_id)]


@router.get("/{scale_id}", response_model=ScaleOut)
def get_scale(scale_id: int, db: Session = Depends(get_db)):
    service = CatalogService(db)
    scale = service.get_scale(scale_id)
    if not scale:
        raise HTTPException(status_code=404, detail="Scale not found")
    return _scale_out(service, scale, include_usage=True)


@router.put("/{scale_id}", response_model=ScaleOut)
def update_scale(scale_id: int, data: ScaleUpdate, db: Session = Depends(get_db)):
    """Replace a scale's title and choices (not allowed once a published survey uses it)."""
    service = CatalogService(db)
    return _scale_out(service, service.update_scale(scale_id, data))


@router.delete("/{scale_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_scale(scale_id: int, db: Session = Depends(get_db)):
    """Delete a scale (only if no question uses it)."""
    CatalogService(db).delete_scale(scale_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
