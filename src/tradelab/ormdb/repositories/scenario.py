"""Repository for scenario definitions."""

from dataclasses import replace
from typing import List, Optional

from sqlalchemy.orm import Session

from ...services.scenario.models import Scenario
from ..serializers import scenario_from_document, scenario_to_document
from .documents import DocumentRepository


class ScenarioRepository(DocumentRepository):
    """Repository for generated and built-in scenarios."""

    def __init__(self, session: Optional[Session] = None):
        super().__init__("scenarios", session)

    def save_scenario(self, scenario: Scenario) -> Scenario:
        """Store a scenario, assigning an id when it has none."""
        if scenario.id:
            self.set(scenario.id, scenario_to_document(scenario))
            return scenario
        return replace(scenario, id=self.add(scenario_to_document(scenario)))

    def get_scenario(self, scenario_id: str) -> Optional[Scenario]:
        doc = self.get(scenario_id)
        return scenario_from_document(scenario_id, doc) if doc else None

    def get_scenarios_for_user(self, user_id: str) -> List[Scenario]:
        """Scenarios created by a user, newest first."""
        return [
            scenario_from_document(doc_id, doc)
            for doc_id, doc in self.query(
                where={"userId": user_id}, order_by="createdAt", descending=True
            )
        ]
