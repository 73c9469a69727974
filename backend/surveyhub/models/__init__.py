from surveyhub.models.tenant import Tenant
from surveyhub.models.respondent import Respondent
from surveyhub.models.scale import Scale, Choice
from surveyhub.models.survey import Survey, SurveyStatus, Question, QuestionType
from surveyhub.models.publication import Publication, AudienceType
from surveyhub.models.response import Response

__all__ = [
    "Tenant",
    "Respondent",
    "Scale",
    "Choice",
    "Survey",
    "SurveyStatus",
    "Question",
    "QuestionType",
    "Publication",
    "AudienceType",
    "Response",
]
