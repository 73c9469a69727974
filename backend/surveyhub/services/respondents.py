from typing import Optional
from sqlalchemy import func
from sqlalchemy.orm import Session
from surveyhub.models.respondent import Respondent


class RespondentDirectory:
    """
    Lookup of respondents synced from the CRM.

    The survey core only reads from it: resolving a respondent for a
    submission or report, and counting who is eligible to respond.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, respondent_id: int, tenant_id: Optional[int] = None) -> Optional[Respondent]:
        query = self.db.query(Respondent).filter(Respondent.id == respondent_id)
        if tenant_id is not None:
            query = query.filter(Respondent.tenant_id == tenant_id)
        return query.first()

    def count_eligible(self, tenant_id: int) -> int:
        total = (
            self.db.query(func.count(Respondent.id))
            .filter(Respondent.tenant_id == tenant_id, Respondent.is_active == True)
            .scalar()
        )
        return int(total or 0)
