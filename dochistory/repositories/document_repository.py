"""Document repository for database operations."""

import uuid
from typing import Any, Optional

from ..models import Document
from ..exceptions import DocumentNotFoundError
from .base import BaseRepository


class DocumentRepository(BaseRepository[Document]):
    """Repository for document CRUD operations."""

    model_class = Document
    not_found_error = DocumentNotFoundError

    def create(self, owner_id: str, title: str, content: Any, doc_id: Optional[str] = None) -> Document:
        """Create a new document."""
        db_document = Document(
            id=doc_id or uuid.uuid4().hex,
            owner_id=owner_id,
            title=title,
            content=content,
            is_submitted=False,
        )
        self.db.add(db_document)
        self.db.flush()
        self.db.refresh(db_document)
        return db_document

    def set_content(self, doc_id: str, content: Any) -> Document:
        """Replace a document's content."""
        db_document = self.get_by_id(doc_id)
        db_document.content = content
        self.db.flush()
        self.db.refresh(db_document)
        return db_document

    def count(self) -> int:
        return self.db.query(Document).count()
