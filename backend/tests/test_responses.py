"""
Tests for response submission.

These tests verify:
    - One response per (respondent, question, publication), later answers overwrite
    - Required questions reject the whole submission
    - Closed, unknown and foreign-tenant lookups short-circuit with a typed result
    - Invalid answers are reported while valid ones are still saved
    - Uniqueness races are retried once, then surface as transient errors
"""

import pytest

from surveyhub.core.exceptions import ErrorKind, TransientStoreError
from surveyhub.models import Respondent, Response
from surveyhub.models.survey import Question, QuestionType
from surveyhub.schemas.catalog import ChoiceIn, QuestionIn, ScaleCreate, SurveyCreate
from surveyhub.schemas.response import AnswerIn


def _responses(db, publication_id):
    return db.query(Response).filter(Response.publication_id == publication_id).all()


class TestUpsert:
    """Submitting and re-submitting answers."""

    def test_single_answer_saved(self, db, vote, publication, respondents, choice):
        result = vote(publication, respondents[0], "A")

        assert result.accepted
        assert result.errors == []
        assert result.saved_count == 1
        rows = _responses(db, publication.id)
        assert len(rows) == 1
        assert rows[0].choice_id == choice("A")
        assert rows[0].tenant_id == publication.tenant_id

    def test_resubmission_overwrites(self, db, vote, publication, respondents, choice):
        vote(publication, respondents[0], "A")
        first_at = _responses(db, publication.id)[0].responded_at

        result = vote(publication, respondents[0], "B")

        assert result.accepted
        db.expire_all()
        rows = _responses(db, publication.id)
        assert len(rows) == 1
        assert rows[0].choice_id == choice("B")
        assert rows[0].responded_at >= first_at

    def test_repeated_question_in_one_submission_keeps_last(self, db, submissions, publication, respondents, choice):
        question_id = publication_question_id(db, publication)
        result = submissions.submit(publication.id, respondents[0].id, [
            AnswerIn(question_id=question_id, value=choice("A")),
            AnswerIn(question_id=question_id, value=choice("B")),
        ])

        assert result.accepted
        rows = _responses(db, publication.id)
        assert len(rows) == 1
        assert rows[0].choice_id == choice("B")

    def test_choice_id_as_numeric_string(self, db, submissions, publication, respondents, choice):
        question_id = publication_question_id(db, publication)
        result = submissions.submit(publication.id, respondents[0].id, [
            AnswerIn(question_id=question_id, value=str(choice("A"))),
        ])
        assert result.accepted

    def test_different_respondents_get_separate_rows(self, db, vote, publication, respondents):
        vote(publication, respondents[0], "A")
        vote(publication, respondents[1], "A")
        assert len(_responses(db, publication.id)) == 2


class TestRequiredQuestions:
    """Required answers gate the whole submission."""

    def test_missing_required_answer_writes_nothing(self, db, submissions, publication, respondents):
        result = submissions.submit(publication.id, respondents[0].id, [])

        assert not result.accepted
        assert result.error_kind == ErrorKind.VALIDATION
        assert result.error_code == "missing_required_answers"
        assert "Pick one" in result.errors[0]
        assert _responses(db, publication.id) == []

    def test_no_required_questions_and_no_answers(self, db, catalog, publications, submissions, tenant, respondents):
        survey = catalog.create_survey(SurveyCreate(
            tenant_id=tenant.id,
            title="Optional only",
            questions=[QuestionIn(question_text="Thoughts?", question_type=QuestionType.FREE_TEXT, sequence=1)],
        ))
        publication = publications.publish_survey(survey.id, "Optional")

        result = submissions.submit(publication.id, respondents[0].id, [])

        assert result.accepted
        assert result.saved_count == 0


class TestRejectedSubmissions:
    """Lookups and state checks that stop a submission before validation."""

    def test_closed_publication(self, db, publications, submissions, publication, respondents, choice):
        publications.close_publication(publication.id)

        result = submissions.submit(publication.id, respondents[0].id, [
            AnswerIn(question_id=publication_question_id(db, publication), value=choice("A")),
        ])

        assert not result.accepted
        assert result.error_kind == ErrorKind.STATE_CONFLICT
        assert result.error_code == "publication_closed"
        assert _responses(db, publication.id) == []

    def test_answers_before_close_stay_readable(self, db, vote, publications, publication, respondents):
        vote(publication, respondents[0], "A")
        publications.close_publication(publication.id)
        assert len(_responses(db, publication.id)) == 1

    def test_unknown_respondent(self, submissions, publication):
        result = submissions.submit(publication.id, 9999, [])
        assert result.error_kind == ErrorKind.NOT_FOUND
        assert result.error_code == "respondent_not_found"

    def test_unknown_publication(self, submissions, respondents):
        result = submissions.submit(9999, respondents[0].id, [])
        assert result.error_kind == ErrorKind.NOT_FOUND
        assert result.error_code == "publication_not_found"

    def test_respondent_of_other_tenant_is_not_found(self, db, submissions, publication, other_tenant, choice):
        outsider = Respondent(tenant_id=other_tenant.id, first_name="Eve")
        db.add(outsider)
        db.commit()

        result = submissions.submit(publication.id, outsider.id, [
            AnswerIn(question_id=publication_question_id(db, publication), value=choice("A")),
        ])

        assert result.error_code == "respondent_not_found"
        assert _responses(db, publication.id) == []


class TestInvalidAnswers:
    """Per-answer validation."""

    @pytest.fixture
    def mixed_publication(self, publications, mixed_survey):
        return publications.publish_survey(mixed_survey.id, "Workshop")

    def test_unknown_question_skipped_valid_answer_saved(self, db, submissions, mixed_publication, mixed_survey, respondents, choice):
        mc_question = mixed_survey.questions[0]
        result = submissions.submit(mixed_publication.id, respondents[0].id, [
            AnswerIn(question_id=mc_question.id, value=choice("A")),
            AnswerIn(question_id=99999, value="hello"),
        ])

        assert not result.accepted
        assert result.error_code == "invalid_answers"
        assert result.errors == ["Invalid question ID: 99999"]
        assert result.saved_count == 1
        assert len(_responses(db, mixed_publication.id)) == 1

    @pytest.mark.parametrize("value", ["²", "①", "abc", "1.5"])
    def test_non_numeric_choice_is_invalid_answer(self, db, submissions, mixed_publication, mixed_survey, respondents, value):
        mc_question = mixed_survey.questions[0]
        result = submissions.submit(mixed_publication.id, respondents[0].id, [
            AnswerIn(question_id=mc_question.id, value=value),
        ])

        assert not result.accepted
        assert result.error_kind == ErrorKind.VALIDATION
        assert result.error_code == "invalid_answers"
        assert result.errors == [f"Invalid answer for question: Was it useful? (question {mc_question.id})"]
        assert _responses(db, mixed_publication.id) == []

    def test_choice_from_another_scale_rejected(self, db, catalog, submissions, mixed_publication, mixed_survey, respondents, tenant):
        other_scale = catalog.create_scale(ScaleCreate(
            tenant_id=tenant.id,
            title="Other",
            choices=[ChoiceIn(text="Z", sequence=1)],
        ))
        mc_question = mixed_survey.questions[0]

        result = submissions.submit(mixed_publication.id, respondents[0].id, [
            AnswerIn(question_id=mc_question.id, value=other_scale.choices[0].id),
        ])

        assert not result.accepted
        assert "Was it useful?" in result.errors[0]
        assert _responses(db, mixed_publication.id) == []

    def test_free_text_too_long(self, db, submissions, mixed_publication, mixed_survey, respondents, choice):
        mc_question, text_question = mixed_survey.questions
        result = submissions.submit(mixed_publication.id, respondents[0].id, [
            AnswerIn(question_id=mc_question.id, value=choice("B")),
            AnswerIn(question_id=text_question.id, value="x" * 21),
        ])

        assert not result.accepted
        assert result.errors == [f"Invalid answer for question: Anything else? (question {text_question.id})"]
        assert result.saved_count == 1

    def test_free_text_blank(self, submissions, mixed_publication, mixed_survey, respondents, choice):
        mc_question, text_question = mixed_survey.questions
        result = submissions.submit(mixed_publication.id, respondents[0].id, [
            AnswerIn(question_id=mc_question.id, value=choice("B")),
            AnswerIn(question_id=text_question.id, value="   "),
        ])
        assert not result.accepted

    def test_free_text_saved_trimmed(self, db, submissions, mixed_publication, mixed_survey, respondents, choice):
        mc_question, text_question = mixed_survey.questions
        result = submissions.submit(mixed_publication.id, respondents[0].id, [
            AnswerIn(question_id=mc_question.id, value=choice("B")),
            AnswerIn(question_id=text_question.id, value="  Great talk  "),
        ])

        assert result.accepted
        saved = db.query(Response).filter(Response.question_id == text_question.id).one()
        assert saved.response_text == "Great talk"
        assert saved.choice_id is None


class TestStoreConflicts:
    """Uniqueness races on the response row."""

    def test_conflict_retried_as_update(self, db, vote, submissions, publication, respondents, choice, monkeypatch):
        """A concurrent insert of the same row is caught and the retry updates it."""
        vote(publication, respondents[0], "A")

        real_find = submissions._find_response
        calls = {"n": 0}

        def racing_find(*args):
            calls["n"] += 1
            if calls["n"] == 1:
                return None
            return real_find(*args)

        monkeypatch.setattr(submissions, "_find_response", racing_find)

        result = vote(publication, respondents[0], "B")

        assert result.accepted
        assert calls["n"] == 2
        rows = _responses(db, publication.id)
        assert len(rows) == 1
        assert rows[0].choice_id == choice("B")

    def test_persistent_conflict_is_transient_error(self, db, vote, submissions, publication, respondents, choice, monkeypatch):
        vote(publication, respondents[0], "A")
        first_at = _responses(db, publication.id)[0].responded_at
        monkeypatch.setattr(submissions, "_find_response", lambda *args: None)

        with pytest.raises(TransientStoreError):
            vote(publication, respondents[0], "B")

        db.expire_all()
        rows = _responses(db, publication.id)
        assert len(rows) == 1
        assert rows[0].choice_id == choice("A")
        assert rows[0].responded_at == first_at

    def test_failed_commit_applies_no_answer(self, db, submissions, publications, mixed_survey, respondents, choice, monkeypatch):
        """A conflict on one answer rolls back the others of the same submission."""
        workshop = publications.publish_survey(mixed_survey.id, "Workshop")
        mc_question, text_question = mixed_survey.questions

        # Invalid choice is skipped, so only the free-text row exists afterwards
        submissions.submit(workshop.id, respondents[0].id, [
            AnswerIn(question_id=mc_question.id, value="nope"),
            AnswerIn(question_id=text_question.id, value="first"),
        ])
        assert len(_responses(db, workshop.id)) == 1

        real_find = submissions._find_response

        def find_missing_text(respondent_id, question_id, publication_id):
            if question_id == text_question.id:
                return None
            return real_find(respondent_id, question_id, publication_id)

        monkeypatch.setattr(submissions, "_find_response", find_missing_text)

        with pytest.raises(TransientStoreError):
            submissions.submit(workshop.id, respondents[0].id, [
                AnswerIn(question_id=mc_question.id, value=choice("A")),
                AnswerIn(question_id=text_question.id, value="second"),
            ])

        db.expire_all()
        rows = _responses(db, workshop.id)
        assert len(rows) == 1
        assert rows[0].question_id == text_question.id
        assert rows[0].response_text == "first"


def publication_question_id(db, publication):
    return (
        db.query(Question.id)
        .filter(Question.survey_id == publication.survey_id)
        .order_by(Question.sequence)
        .first()[0]
    )
