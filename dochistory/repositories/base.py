"""Primary-key lookups shared by the repositories."""

from typing import Generic, Optional, Type, TypeVar

from sqlalchemy.orm import Session

from ..database import Base
from ..exceptions import DocHistoryException

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """Repositories set ``model_class`` and the error raised for a missing row.

    Repositories flush but never commit; services own the transaction.
    """

    model_class: Type[ModelT]
    not_found_error: Type[DocHistoryException]

    def __init__(self, db: Session):
        self.db = db

    def get_by_id_optional(self, entity_id) -> Optional[ModelT]:
        return self.db.get(self.model_class, entity_id)

    def get_by_id(self, entity_id) -> ModelT:
        entity = self.get_by_id_optional(entity_id)
        if entity is None:
            raise self.not_found_error(entity_id)
        return entity
