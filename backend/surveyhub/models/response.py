from sqlalchemy import Column, Integer, DateTime, Text, ForeignKey, UniqueConstraint
from surveyhub.core.database import Base


class Response(Base):
    """One respondent's answer to one question of one publication."""
    __tablename__ = "responses"
    __table_args__ = (
        UniqueConstraint(
            "respondent_id", "question_id", "publication_id",
            name="uq_response_respondent_question_publication",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)
    publication_id = Column(Integer, ForeignKey("publications.id"), nullable=False, index=True)
    respondent_id = Column(Integer, ForeignKey("respondents.id"), nullable=False, index=True)
    question_id = Column(Integer, ForeignKey("questions.id"), nullable=False, index=True)

    # Exactly one of these is set, depending on the question type
    choice_id = Column(Integer, ForeignKey("choices.id"), nullable=True)
    response_text = Column(Text, nullable=True)

    responded_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, nullable=False)
