"""Task lifecycle operations.

Every operation receives the caller's ``AuthContext``, authorizes it through
``backend.services.policy`` and only then writes to the task store. Status
moves forward only: ``not_started -> in_progress -> completed``. Submitting
the current status again is a no-op.
"""

import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy.orm import Session

from backend.auth.dependencies import AuthContext
from backend.core.errors import Conflict, Forbidden, NotFound, ValidationFailed
from backend.models.task import Task, TaskStatus
from backend.models.user import User
from backend.services.policy import Operation, authorize
from backend.stores.task_store import TaskStore
from backend.stores.user_store import UserStore

logger = logging.getLogger(__name__)

ADMIN_FIELDS = frozenset({'title', 'description', 'assigned_to'})
STUDENT_FIELDS = frozenset({'status'})
PATCHABLE_FIELDS = ADMIN_FIELDS | STUDENT_FIELDS


@dataclass(frozen=True)
class TaskView:
    """A task plus, for admins, the user it is assigned to."""

    task: Task
    assignee: User | None = None


def _require_text(value: Any, field: str) -> str:
    text = value.strip() if isinstance(value, str) else ''
    if not text:
        raise ValidationFailed(f'{field.capitalize()} is required.')
    return text


def parse_status(value: TaskStatus | str) -> TaskStatus:
    try:
        return TaskStatus(value)
    except ValueError as exc:
        allowed = ', '.join(status.value for status in TaskStatus)
        raise ValidationFailed(f'Status must be one of: {allowed}.') from exc


def check_transition(current: TaskStatus, new: TaskStatus) -> None:
    if new.rank < current.rank:
        raise Conflict(f'Task status cannot move from {current.value} back to {new.value}.')


class TaskLifecycleManager:
    def __init__(self, db: Session):
        self.tasks = TaskStore(db)
        self.users = UserStore(db)

    def _get_task(self, task_id: int) -> Task:
        task = self.tasks.get(task_id)
        if task is None:
            raise NotFound('Task not found')
        return task

    def _require_user(self, user_id: int) -> User:
        user = self.users.get(user_id)
        if user is None:
            raise NotFound('Assigned user not found')
        return user

    def create_task(self, context: AuthContext, title: str, description: str | None, assigned_to: int) -> Task:
        authorize(context, Operation.CREATE_TASK)
        title = _require_text(title, 'title')
        self._require_user(assigned_to)

        task = self.tasks.create(
            title=title,
            description=(description or '').strip(),
            assigned_to=assigned_to,
            status=TaskStatus.NOT_STARTED,
            verified=False,
        )
        logger.info('Task %s created by user %s for user %s', task.id, context.user_id, assigned_to)
        return task

    def list_tasks(self, context: AuthContext) -> list[TaskView]:
        authorize(context, Operation.LIST_TASKS)
        if not context.is_admin:
            return [TaskView(task=task) for task in self.tasks.find(assigned_to=context.user_id)]

        tasks = self.tasks.find()
        assignees = self.users.get_many({task.assigned_to for task in tasks})
        return [TaskView(task=task, assignee=assignees.get(task.assigned_to)) for task in tasks]

    def update_task(self, context: AuthContext, task_id: int, patch: dict[str, Any]) -> Task:
        task = self._get_task(task_id)
        authorize(context, Operation.UPDATE_TASK, task)

        if not patch:
            raise ValidationFailed('Nothing to update.')
        unknown = set(patch) - PATCHABLE_FIELDS
        if unknown:
            raise ValidationFailed(f'Unknown fields: {", ".join(sorted(unknown))}.')

        if not context.is_admin and set(patch) - STUDENT_FIELDS:
            logger.warning('User %s tried to edit non-status fields of task %s', context.user_id, task_id)
            raise Forbidden('Students can only update task status')

        changes: dict[str, Any] = {}
        if 'status' in patch:
            authorize(context, Operation.SET_STATUS, task)
            new_status = parse_status(patch['status'])
            check_transition(task.status, new_status)
            changes['status'] = new_status
        if 'title' in patch:
            changes['title'] = _require_text(patch['title'], 'title')
        if 'description' in patch:
            changes['description'] = (patch['description'] or '').strip()
        if 'assigned_to' in patch:
            if patch['assigned_to'] is None:
                raise ValidationFailed('Assigned user is required.')
            self._require_user(patch['assigned_to'])
            changes['assigned_to'] = patch['assigned_to']

        return self.tasks.update(task, changes)

    def set_status(self, context: AuthContext, task_id: int, new_status: TaskStatus | str) -> Task:
        task = self._get_task(task_id)
        authorize(context, Operation.SET_STATUS, task)

        new_status = parse_status(new_status)
        check_transition(task.status, new_status)
        if new_status is task.status:
            return task
        return self.tasks.update(task, {'status': new_status})

    def verify_task(self, context: AuthContext, task_id: int) -> Task:
        authorize(context, Operation.VERIFY_TASK)
        task = self._get_task(task_id)

        if task.status is not TaskStatus.COMPLETED:
            raise Conflict('Only completed tasks can be verified.')
        if task.verified:
            return task

        task = self.tasks.update(task, {'verified': True})
        logger.info('Task %s verified by user %s', task_id, context.user_id)
        return task

    def delete_task(self, context: AuthContext, task_id: int) -> None:
        authorize(context, Operation.DELETE_TASK)
        if self.tasks.delete(task_id):
            logger.info('Task %s deleted by user %s', task_id, context.user_id)
        else:
            logger.info('Task %s already absent; delete by user %s is a no-op', task_id, context.user_id)
