"""Generic repository over JSON document collections."""

import uuid
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from ...exceptions import DocumentNotFoundError
from ..models import Document
from .base import BaseRepository

DocumentData = Dict[str, Any]


def _field_equals(key: str, value: Any):
    """SQL condition matching a top-level JSON field against a scalar."""
    field = Document.data[key]
    if value is None:
        return field.as_string().is_(None)
    if isinstance(value, bool):
        return field.as_boolean() == value
    if isinstance(value, int):
        return field.as_integer() == value
    if isinstance(value, float):
        return field.as_float() == value
    return field.as_string() == str(value)


class DocumentRepository(BaseRepository):
    """Key-value document operations on a single collection. Last write wins."""

    def __init__(self, collection: str, session: Optional[Session] = None):
        super().__init__(session)
        self.collection = collection

    def _row(self, doc_id: str) -> Optional[Document]:
        return (
            self.session.query(Document)
            .filter(Document.collection == self.collection, Document.doc_id == doc_id)
            .first()
        )

    def add(self, data: DocumentData) -> str:
        """Store a new document under a generated id and return the id."""
        doc_id = uuid.uuid4().hex
        self.set(doc_id, data)
        return doc_id

    def set(self, doc_id: str, data: DocumentData) -> None:
        """Create or replace a document."""
        row = self._row(doc_id)
        if row:
            row.data = dict(data)
        else:
            self.session.add(
                Document(collection=self.collection, doc_id=doc_id, data=dict(data))
            )
        self._commit()

    def get(self, doc_id: str) -> Optional[DocumentData]:
        row = self._row(doc_id)
        return dict(row.data) if row else None

    def update(self, doc_id: str, fields: DocumentData) -> DocumentData:
        """
        Merge fields into an existing document.

        Raises:
            DocumentNotFoundError: If the document does not exist
        """
        row = self._row(doc_id)
        if not row:
            raise DocumentNotFoundError(self.collection, doc_id)
        merged = dict(row.data)
        merged.update(fields)
        # Reassign so the JSON column is marked dirty
        row.data = merged
        self._commit()
        return dict(merged)

    def delete(self, doc_id: str) -> bool:
        row = self._row(doc_id)
        if not row:
            return False
        self.session.delete(row)
        self._commit()
        return True

    def query(
        self,
        where: Optional[DocumentData] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Tuple[str, DocumentData]]:
        """
        Find documents whose fields equal every value in ``where``.

        Returns:
            (doc_id, data) pairs, optionally sorted by a document field
        """
        query = self.session.query(Document).filter(Document.collection == self.collection)
        for key, value in (where or {}).items():
            query = query.filter(_field_equals(key, value))
        matches = [(row.doc_id, dict(row.data)) for row in query.order_by(Document.id).all()]

        if order_by:
            present = [m for m in matches if m[1].get(order_by) is not None]
            missing = [m for m in matches if m[1].get(order_by) is None]
            present.sort(key=lambda item: item[1][order_by], reverse=descending)
            # Documents missing the field always sort last
            matches = present + missing
        if limit is not None:
            matches = matches[:limit]
        return matches

    def count(self) -> int:
        return (
            self.session.query(Document)
            .filter(Document.collection == self.collection)
            .count()
        )
