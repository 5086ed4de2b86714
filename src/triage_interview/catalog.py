"""CatalogStore — loads the phase-1 question catalog from YAML.

This is the single source of question content at runtime.  The store is
loaded once at startup and provides ordered access plus lookup by id and
category.

Usage::

    store = CatalogStore()          # defaults to the bundled cardiology catalog
    store.load()                    # parse and validate the YAML file

    q = store.get_question("smoking")
    risk = store.get_questions_by_category("risk_factors")
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from triage_interview.constants import CATEGORY_ORDER
from triage_interview.models.question import Question

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_PATH = Path(__file__).parent / "data" / "cardiology.yaml"


def load_yaml(path: Path | str) -> Any:
    """Load a single YAML file and return the parsed contents."""
    if isinstance(path, str):
        path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Missing YAML file: {path}")
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f)


class CatalogStore:
    """Loads a question catalog YAML file and provides typed lookup.

    The YAML file has two top-level keys:

        categories — mapping of category id to {name, description}
        questions  — ordered list of question definitions

    Attributes populated after :meth:`load`:

        questions   — list[Question] in catalog order
        categories  — dict[category_id, dict] with name/description
    """

    def __init__(self, catalog_path: str | Path | None = None) -> None:
        self._path = Path(catalog_path) if catalog_path is not None else DEFAULT_CATALOG_PATH

        # Populated by load()
        self.questions: list[Question] = []
        self.categories: dict[str, dict[str, str]] = {}
        self._by_id: dict[str, Question] = {}

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self) -> None:
        """Parse and validate the catalog file.

        Raises ``FileNotFoundError`` if the file is missing and
        ``ValueError`` for duplicate ids or unknown categories.
        """
        raw = load_yaml(self._path) or {}

        categories = raw.get("categories") or {}
        unknown = set(categories) - set(CATEGORY_ORDER)
        if unknown:
            raise ValueError(f"Unknown categories in catalog: {sorted(unknown)}")
        self.categories = {
            key: {"name": value.get("name", key), "description": value.get("description", "")}
            for key, value in categories.items()
        }

        questions: list[Question] = []
        by_id: dict[str, Question] = {}
        for q_dict in raw.get("questions") or []:
            q = Question(**q_dict)
            if q.id in by_id:
                raise ValueError(f"Duplicate question id '{q.id}' in catalog")
            by_id[q.id] = q
            questions.append(q)

        self.questions = questions
        self._by_id = by_id
        logger.info(
            "CatalogStore loaded: %d questions in %d categories from %s",
            len(self.questions),
            len(self.categories),
            self._path.name,
        )

    # ------------------------------------------------------------------
    # Lookup helpers
    # ------------------------------------------------------------------

    @property
    def total_questions(self) -> int:
        return len(self.questions)

    def get_question(self, question_id: str) -> Question:
        """Look up a question by id.

        Raises:
            KeyError: if the id is not in the catalog.
        """
        return self._by_id[question_id]

    def get_questions_by_category(self, category: str) -> list[Question]:
        """Return the questions of one category, in catalog order."""
        return [q for q in self.questions if q.category == category]
