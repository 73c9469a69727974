"""
Shared fixtures: an in-memory SQLite store per test plus a small tenant with
respondents, an A/B scale, a one-question survey and an open publication.
"""
import os

# Must be set before surveyhub.core.database builds its module-level engine
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from surveyhub.core.database import Base
from surveyhub.models import Tenant, Respondent
from surveyhub.models.survey import QuestionType
from surveyhub.schemas.catalog import ScaleCreate, ChoiceIn, SurveyCreate, QuestionIn
from surveyhub.schemas.response import AnswerIn
from surveyhub.services.catalog import CatalogService
from surveyhub.services.publication import PublicationService
from surveyhub.services.responses import ResponseSubmissionService


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def tenant(db):
    tenant = Tenant(name="Acme Summit")
    db.add(tenant)
    db.commit()
    db.refresh(tenant)
    return tenant


@pytest.fixture
def other_tenant(db):
    tenant = Tenant(name="Other Expo")
    db.add(tenant)
    db.commit()
    db.refresh(tenant)
    return tenant


@pytest.fixture
def respondents(db, tenant):
    people = [
        Respondent(tenant_id=tenant.id, first_name="Ada", last_name="Lovelace", email="ada@example.com"),
        Respondent(tenant_id=tenant.id, first_name="Alan", last_name="Turing", email="alan@example.com"),
        Respondent(tenant_id=tenant.id, first_name="Grace", last_name="Hopper", email="grace@example.com"),
        Respondent(tenant_id=tenant.id, first_name="Linus", last_name="Torvalds", email="linus@example.com"),
    ]
    db.add_all(people)
    db.commit()
    for person in people:
        db.refresh(person)
    return people


@pytest.fixture
def catalog(db):
    return CatalogService(db)


@pytest.fixture
def ab_scale(catalog, tenant):
    return catalog.create_scale(ScaleCreate(
        tenant_id=tenant.id,
        title="A or B",
        choices=[
            ChoiceIn(text="A", value=1, sequence=1),
            ChoiceIn(text="B", value=2, sequence=2),
        ],
    ))


@pytest.fixture
def mc_survey(catalog, tenant, ab_scale):
    """Draft survey with one required multiple-choice question on the A/B scale."""
    return catalog.create_survey(SurveyCreate(
        tenant_id=tenant.id,
        title="Keynote feedback",
        questions=[
            QuestionIn(
                question_text="Pick one",
                question_type=QuestionType.MULTIPLE_CHOICE,
                sequence=1,
                is_required=True,
                scale_id=ab_scale.id,
            ),
        ],
    ))


@pytest.fixture
def mixed_survey(catalog, tenant, ab_scale):
    """Required multiple-choice question followed by an optional free-text one."""
    return catalog.create_survey(SurveyCreate(
        tenant_id=tenant.id,
        title="Workshop feedback",
        questions=[
            QuestionIn(
                question_text="Was it useful?",
                question_type=QuestionType.MULTIPLE_CHOICE,
                sequence=1,
                is_required=True,
                scale_id=ab_scale.id,
            ),
            QuestionIn(
                question_text="Anything else?",
                question_type=QuestionType.FREE_TEXT,
                sequence=2,
                max_length=20,
            ),
        ],
    ))


@pytest.fixture
def publications(db):
    return PublicationService(db)


@pytest.fixture
def publication(publications, mc_survey):
    return publications.publish_survey(mc_survey.id, "Keynote - day 1", audience_ref="session-42")


@pytest.fixture
def submissions(db):
    return ResponseSubmissionService(db)


def choice_id(scale, text):
    return next(c.id for c in scale.choices if c.text == text)


@pytest.fixture
def vote(submissions, ab_scale):
    """Submit a single A/B answer for the first question of a publication."""
    def _vote(publication, respondent, label, question=None):
        question_id = question.id if question is not None else _first_question_id(submissions.db, publication)
        return submissions.submit(
            publication.id,
            respondent.id,
            [AnswerIn(question_id=question_id, value=choice_id(ab_scale, label))],
        )
    return _vote


def _first_question_id(db, publication):
    from surveyhub.models.survey import Question
    return (
        db.query(Question.id)
        .filter(Question.survey_id == publication.survey_id)
        .order_by(Question.sequence)
        .first()[0]
    )


@pytest.fixture
def choice(ab_scale):
    """Choice id on the A/B scale by label."""
    return lambda label: choice_id(ab_scale, label)
