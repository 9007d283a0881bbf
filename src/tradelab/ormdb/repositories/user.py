"""Repository for user profiles."""

from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from ...services.user import User
from ..serializers import user_from_document, user_to_document
from .documents import DocumentRepository


class UserRepository(DocumentRepository):
    """Users are keyed by their authentication id."""

    def __init__(self, session: Optional[Session] = None):
        super().__init__("users", session)

    def create_user(self, user: User) -> User:
        self.set(user.id, user_to_document(user))
        return user

    def get_user(self, user_id: str) -> Optional[User]:
        doc = self.get(user_id)
        return user_from_document(user_id, doc) if doc else None

    def update_user(self, user_id: str, **fields: Any) -> User:
        """Update profile fields given in domain (snake_case) names."""
        names = {"email": "email", "display_name": "displayName", "photo_url": "photoURL"}
        updates: Dict[str, Any] = {names[key]: value for key, value in fields.items() if key in names}
        return user_from_document(user_id, self.update(user_id, updates))
