"""
Database initialization script
Run this to create tables and seed a demo tenant
"""
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent))

from surveyhub.core.database import engine, Base, SessionLocal
from surveyhub.models import Tenant, Respondent
from surveyhub.models.survey import QuestionType
from surveyhub.schemas.catalog import ScaleCreate, ChoiceIn, SurveyCreate, QuestionIn
from surveyhub.services.catalog import CatalogService


def init_db():
    """Initialize database with tables"""
    print("Creating database tables...")
    Base.metadata.create_all(bind=engine)
    print("✓ Tables created successfully")


def seed_data():
    """Seed a demo tenant with respondents, an agreement scale and a draft survey"""
    db = SessionLocal()

    try:
        print("\nSeeding initial data...")

        tenant = db.query(Tenant).filter(Tenant.name == "Demo Conference").first()
        if tenant:
            print("✓ Demo tenant already exists, nothing to do")
            return

        tenant = Tenant(name="Demo Conference")
        db.add(tenant)
        db.commit()
        db.refresh(tenant)
        print(f"✓ Tenant created (id: {tenant.id})")

        for first, last, email in [
            ("Ada", "Lovelace", "ada@example.com"),
            ("Alan", "Turing", "alan@example.com"),
            ("Grace", "Hopper", "grace@example.com"),
        ]:
            db.add(Respondent(tenant_id=tenant.id, first_name=first, last_name=last, email=email))
        db.commit()
        print("✓ Sample respondents created")

        catalog = CatalogService(db)
        scale = catalog.create_scale(ScaleCreate(
            tenant_id=tenant.id,
            title="Agreement (1-5)",
            shareable=True,
            choices=[
                ChoiceIn(text="Strongly disagree", value=1, sequence=1),
                ChoiceIn(text="Disagree", value=2, sequence=2),
                ChoiceIn(text="Neutral", value=3, sequence=3),
                ChoiceIn(text="Agree", value=4, sequence=4),
                ChoiceIn(text="Strongly agree", value=5, sequence=5),
            ],
        ))
        print(f"✓ Scale created: {scale.title}")

        survey = catalog.create_survey(SurveyCreate(
            tenant_id=tenant.id,
            title="Session feedback",
            description="Tell us how the session went",
            questions=[
                QuestionIn(
                    question_text="The session met my expectations",
                    question_type=QuestionType.MULTIPLE_CHOICE,
                    sequence=1,
                    is_required=True,
                    scale_id=scale.id,
                ),
                QuestionIn(
                    question_text="What could be improved?",
                    question_type=QuestionType.FREE_TEXT,
                    sequence=2,
                ),
            ],
        ))
        print(f"✓ Draft survey created: {survey.title} (id: {survey.id})")

        print("\n✓ Database seeded successfully!")

    except Exception as e:
        print(f"\n✗ Error seeding data: {e}")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    init_db()
    seed_data()
