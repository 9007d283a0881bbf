"""Repository for uploaded study materials."""

from dataclasses import replace
from typing import List, Optional

from sqlalchemy.orm import Session

from ...services.materials.models import MaterialStatus, UploadedMaterial
from ..serializers import material_from_document, material_to_document
from .documents import DocumentRepository


class MaterialRepository(DocumentRepository):
    """Repository for material documents."""

    def __init__(self, session: Optional[Session] = None):
        super().__init__("materials", session)

    def save_material(self, material: UploadedMaterial) -> UploadedMaterial:
        """Store a material, assigning an id when it has none."""
        if material.id:
            self.set(material.id, material_to_document(material))
            return material
        return replace(material, id=self.add(material_to_document(material)))

    def get_material(self, material_id: str) -> Optional[UploadedMaterial]:
        doc = self.get(material_id)
        return material_from_document(material_id, doc) if doc else None

    def get_materials_for_user(self, user_id: str) -> List[UploadedMaterial]:
        """Materials of a user, newest upload first."""
        return [
            material_from_document(doc_id, doc)
            for doc_id, doc in self.query(
                where={"userId": user_id}, order_by="uploadedAt", descending=True
            )
        ]

    def update_status(self, material_id: str, status: MaterialStatus) -> UploadedMaterial:
        return material_from_document(
            material_id, self.update(material_id, {"status": status.value})
        )

    def delete_material(self, material_id: str) -> bool:
        return self.delete(material_id)
