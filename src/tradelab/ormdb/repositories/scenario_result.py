"""Repository for completed scenario results."""

from typing import List, Optional

from sqlalchemy.orm import Session

from ...services.scenario.models import ScenarioResult
from ..serializers import scenario_result_from_document, scenario_result_to_document
from .documents import DocumentRepository

RECENT_RESULTS_LIMIT = 10


class ScenarioResultRepository(DocumentRepository):
    """Repository for scenario result documents."""

    def __init__(self, session: Optional[Session] = None):
        super().__init__("scenarioResults", session)

    def save_result(self, result: ScenarioResult) -> str:
        return self.add(scenario_result_to_document(result))

    def get_results_for_user(
        self, user_id: str, limit: int = RECENT_RESULTS_LIMIT
    ) -> List[ScenarioResult]:
        """Latest results of a user, newest first."""
        return [
            scenario_result_from_document(doc)
            for _, doc in self.query(
                where={"userId": user_id},
                order_by="completedAt",
                descending=True,
                limit=limit,
            )
        ]
