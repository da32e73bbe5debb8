"""Persistence for task records.

Each mutating call commits a single row. On a failed commit the session is
rolled back and ``InternalError`` is raised; nothing is retried.
"""

import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.core.errors import InternalError
from backend.models.task import Task

logger = logging.getLogger(__name__)


class TaskStore:
    def __init__(self, db: Session):
        self.db = db

    def _commit(self, action: str) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception('Failed to %s task', action)
            raise InternalError('Database unavailable.') from exc

    def create(self, **fields: Any) -> Task:
        task = Task(**fields)
        self.db.add(task)
        self._commit('create')
        self.db.refresh(task)
        return task

    def get(self, task_id: int) -> Task | None:
        return self.db.get(Task, task_id)

    def find(self, **filters: Any) -> list[Task]:
        query = self.db.query(Task)
        for field, value in filters.items():
            query = query.filter(getattr(Task, field) == value)
        return query.order_by(Task.created_at.asc(), Task.id.asc()).all()

    def update(self, task: Task, changes: dict[str, Any]) -> Task:
        for field, value in changes.items():
            setattr(task, field, value)
        self._commit('update')
        self.db.refresh(task)
        return task

    def delete(self, task_id: int) -> bool:
        task = self.get(task_id)
        if task is None:
            return False
        self.db.delete(task)
        self._commit('delete')
        return True
