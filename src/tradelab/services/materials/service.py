"""Study material upload, storage and analysis."""

import base64
import binascii
import uuid
from contextlib import contextmanager
from pathlib import PurePath
from typing import Callable, Iterator, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...config.logging import get_logger
from ...config.settings import get_settings
from ...exceptions import MaterialValidationError, PersistenceError
from ...oracle import handlers as oracle
from ...oracle.client import OracleClient
from ...oracle.session import OracleSession
from ...ormdb.database import get_session_factory
from ...ormdb.repositories import MaterialRepository
from .models import DocumentAnalysis, MaterialStatus, UploadedMaterial

logger = get_logger(__name__)

MEDIA_TYPES = {
    "pdf": "application/pdf",
    "doc": "application/msword",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "txt": "text/plain",
}


class MaterialService:
    """Validates uploads, stores them base64-encoded and runs document analysis."""

    def __init__(
        self,
        session_factory: Optional[Callable[[], Session]] = None,
        oracle_session: Optional[OracleSession] = None,
        oracle_client: Optional[OracleClient] = None,
    ):
        settings = get_settings()
        self.max_size = settings.max_upload_size_bytes
        self.allowed_extensions = settings.allowed_upload_extensions
        self._session_factory = session_factory
        self.oracle_session = oracle_session or OracleSession()
        self.oracle_client = oracle_client
        self.logger = logger.bind(component="material_service")

    @contextmanager
    def _repository(self, operation: str) -> Iterator[MaterialRepository]:
        factory = self._session_factory or get_session_factory()
        try:
            with MaterialRepository(factory()) as repo:
                try:
                    yield repo
                finally:
                    repo.session.close()
        except SQLAlchemyError as e:
            self.logger.error("Material store operation failed", operation=operation, error=str(e))
            raise PersistenceError(operation, str(e)) from e

    def validate_upload(self, file_name: str, size: int) -> str:
        """
        Check an upload's type and size.

        Returns:
            The lower-case file extension

        Raises:
            MaterialValidationError: If the type is not allowed or the file is too large
        """
        extension = PurePath(file_name).suffix.lower().lstrip(".")
        if extension not in self.allowed_extensions:
            allowed = ", ".join(self.allowed_extensions)
            raise MaterialValidationError(
                file_name, f"Unsupported file type '.{extension}'. Allowed types: {allowed}"
            )
        if size > self.max_size:
            raise MaterialValidationError(
                file_name,
                f"File is too large ({size} bytes). Maximum size is {self.max_size // (1024 * 1024)} MB",
            )
        if size <= 0:
            raise MaterialValidationError(file_name, "File is empty")
        return extension

    def upload(
        self,
        user_id: str,
        file_name: str,
        raw_bytes: bytes,
        file_type: Optional[str] = None,
    ) -> UploadedMaterial:
        """Validate and store a material with status ``processing``."""
        extension = self.validate_upload(file_name, len(raw_bytes))
        material = UploadedMaterial(
            id=uuid.uuid4().hex,
            user_id=user_id,
            file_name=file_name,
            file_type=file_type or MEDIA_TYPES.get(extension, "application/octet-stream"),
            file_size=len(raw_bytes),
            content=base64.b64encode(raw_bytes).decode("ascii"),
            status=MaterialStatus.PROCESSING,
        )
        with self._repository("upload_material") as repo:
            repo.save_material(material)

        self.logger.info(
            "Material uploaded",
            material_id=material.id,
            user_id=user_id,
            file_name=file_name,
            size=material.file_size,
        )
        return material

    def list_for_user(self, user_id: str) -> List[UploadedMaterial]:
        with self._repository("list_materials") as repo:
            return repo.get_materials_for_user(user_id)

    def delete(self, material_id: str) -> bool:
        with self._repository("delete_material") as repo:
            deleted = repo.delete_material(material_id)
        if deleted:
            self.logger.info("Material deleted", material_id=material_id)
        return deleted

    async def analyze(self, material_id: str) -> Optional[DocumentAnalysis]:
        """
        Run oracle analysis on a stored material and record the outcome.

        Status becomes ``ready`` when the oracle produced a summary and
        ``error`` otherwise. Returns None if the material does not exist.
        """
        with self._repository("get_material") as repo:
            material = repo.get_material(material_id)
        if material is None:
            return None

        analysis = await self._analyze_material(material)
        status = MaterialStatus.READY if analysis.summary else MaterialStatus.ERROR

        with self._repository("update_material_status") as repo:
            repo.update_status(material_id, status)

        self.logger.info("Material analyzed", material_id=material_id, status=status.value)
        return analysis

    async def _analyze_material(self, material: UploadedMaterial) -> DocumentAnalysis:
        if material.file_name.lower().endswith(".txt"):
            try:
                text = base64.b64decode(material.content).decode("utf-8", errors="replace")
            except (binascii.Error, ValueError) as e:
                self.logger.warning("Material content is not valid base64", error=str(e))
                return DocumentAnalysis.empty()
            return await oracle.analyze_document(
                self.oracle_session, text, client=self.oracle_client
            )

        attachment = {
            "type": "document",
            "source": {
                "type": "base64",
                "media_type": material.file_type,
                "data": material.content,
            },
        }
        return await oracle.analyze_document(
            self.oracle_session,
            f"(attached document: {material.file_name})",
            attachment=attachment,
            client=self.oracle_client,
        )
