"""Authorization policy for every guarded operation.

``POLICY`` maps each operation to a single rule. Operations on an existing
task are evaluated against that task so ownership rules can see
``assigned_to``; the rest are evaluated with ``task=None``.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Callable

from backend.auth.dependencies import AuthContext
from backend.core.errors import Forbidden
from backend.models.task import Task

logger = logging.getLogger(__name__)


class Operation(str, enum.Enum):
    LIST_STUDENTS = 'list_students'
    CREATE_TASK = 'create_task'
    LIST_TASKS = 'list_tasks'
    UPDATE_TASK = 'update_task'
    SET_STATUS = 'set_status'
    VERIFY_TASK = 'verify_task'
    DELETE_TASK = 'delete_task'


def is_owner(context: AuthContext, task: Task | None) -> bool:
    return task is not None and task.assigned_to == context.user_id


@dataclass(frozen=True)
class Rule:
    name: str
    check: Callable[[AuthContext, Task | None], bool]
    message: str


ADMIN_ONLY = Rule('admin_only', lambda context, task: context.is_admin, 'Admin only')
ANY_AUTHENTICATED = Rule('any_authenticated', lambda context, task: True, 'Not allowed')
OWNER_ONLY = Rule('owner_only', is_owner, 'Only the assigned student can do this')
ADMIN_OR_OWNER = Rule(
    'admin_or_owner',
    lambda context, task: context.is_admin or is_owner(context, task),
    'Not allowed',
)

POLICY: dict[Operation, Rule] = {
    Operation.LIST_STUDENTS: ADMIN_ONLY,
    Operation.CREATE_TASK: ADMIN_ONLY,
    Operation.LIST_TASKS: ANY_AUTHENTICATED,
    Operation.UPDATE_TASK: ADMIN_OR_OWNER,
    Operation.SET_STATUS: OWNER_ONLY,
    Operation.VERIFY_TASK: ADMIN_ONLY,
    Operation.DELETE_TASK: ADMIN_ONLY,
}


def is_allowed(context: AuthContext, operation: Operation, task: Task | None = None) -> bool:
    return POLICY[operation].check(context, task)


def authorize(context: AuthContext, operation: Operation, task: Task | None = None) -> None:
    rule = POLICY[operation]
    if not rule.check(context, task):
        logger.warning(
            'Denied %s for user %s (%s): rule %s',
            operation.value,
            context.user_id,
            context.role.value,
            rule.name,
        )
        raise Forbidden(rule.message)
