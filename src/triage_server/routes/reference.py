"""Reference data endpoints — the question catalog and its categories."""

from fastapi import APIRouter, Depends

from triage_interview.catalog import CatalogStore
from triage_interview.constants import CATEGORY_ORDER
from triage_interview.models import Question

from triage_server.dependencies import get_store

router = APIRouter(prefix="/catalog", tags=["catalog"])


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------

@router.get("")
def list_questions(
    store: CatalogStore = Depends(get_store),
) -> list[Question]:
    """Return the phase-1 catalog in presentation order."""
    return store.questions


@router.get("/categories")
def list_categories(
    store: CatalogStore = Depends(get_store),
) -> list[dict]:
    """Return the categories in fixed order with their question counts."""
    return [
        {
            "id": category,
            "name": store.categories.get(category, {}).get("name", category),
            "description": store.categories.get(category, {}).get("description", ""),
            "question_count": len(store.get_questions_by_category(category)),
        }
        for category in CATEGORY_ORDER
    ]
