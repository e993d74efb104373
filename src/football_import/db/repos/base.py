from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Generic, TypeVar

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload
from sqlalchemy.orm.interfaces import LoaderOption
from sqlalchemy.sql.elements import ColumnElement

from football_import.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    def __init__(self, session: Session, model: type[ModelT]) -> None:
        self.session = session
        self.model = model

    def _loader_options(self, relations: Sequence[str]) -> list[LoaderOption]:
        """Turn dotted relation paths ("teams.players") into selectinload chains."""

        options: list[LoaderOption] = []
        for path in relations:
            entity: Any = self.model
            loader: Any = None
            for attr_name in path.split("."):
                attr = getattr(entity, attr_name)
                loader = selectinload(attr) if loader is None else loader.selectinload(attr)
                entity = attr.property.mapper.class_
            if loader is not None:
                options.append(loader)
        return options

    def add(self, obj: ModelT, *, flush: bool = True) -> ModelT:
        self.session.add(obj)
        if flush:
            self.session.flush()  # assigns PKs, etc.
        return obj

    def create(self, *, flush: bool = True, **fields: Any) -> ModelT:
        return self.add(self.model(**fields), flush=flush)

    def save(self, obj: ModelT) -> ModelT:
        return self.add(obj, flush=True)

    def find_one(
        self,
        *predicates: ColumnElement[bool],
        relations: Sequence[str] = (),
        populate_existing: bool = False,
    ) -> ModelT | None:
        stmt = select(self.model).where(*predicates).limit(1)
        if relations:
            stmt = stmt.options(*self._loader_options(relations))
        if populate_existing:
            # Overwrite already-loaded objects/collections with current DB state.
            stmt = stmt.execution_options(populate_existing=True)
        return self.session.execute(stmt).scalars().first()

    def list(self, *, offset: int = 0, limit: int | None = None) -> list[ModelT]:
        stmt = select(self.model).order_by(self.model.id).offset(offset)  # type: ignore[attr-defined]
        if limit is not None:
            stmt = stmt.limit(limit)
        return list(self.session.execute(stmt).scalars().all())

    def count(self) -> int:
        stmt = select(func.count()).select_from(self.model)
        return int(self.session.execute(stmt).scalar_one())
