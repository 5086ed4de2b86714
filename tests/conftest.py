import pytest

from triage_interview.catalog import CatalogStore
from triage_interview.models import Demographics, Question, QuestionOption


@pytest.fixture(scope="session")
def store():
    """Load the bundled cardiology catalog once for the entire test session."""
    s = CatalogStore()
    s.load()
    return s


@pytest.fixture
def demographics():
    return Demographics(sex="male", age=55)


@pytest.fixture
def small_catalog():
    """Three-question catalog: required text, optional text, required multiselect."""
    return [
        Question(id="q_text", category="lifestyle", text="Describe your diet", type="text"),
        Question(
            id="q_optional", category="chief_complaint", text="Anything else?",
            type="textarea", required=False,
        ),
        Question(
            id="q_multi", category="risk_factors", text="Which apply?", type="multiselect",
            options=[
                QuestionOption(value="a", label="A"),
                QuestionOption(value="b", label="B"),
            ],
            allow_other=True,
        ),
    ]
