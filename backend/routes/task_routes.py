from datetime import datetime

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.orm import Session

from backend.auth.dependencies import AuthContext, get_auth_context
from backend.database import get_db
from backend.models.task import Task, TaskStatus
from backend.routes.auth_routes import MessageResponse, UserSummaryResponse
from backend.services.task_lifecycle import TaskLifecycleManager, TaskView

router = APIRouter(tags=['tasks'])

MAX_TITLE_LENGTH = 200
MAX_DESCRIPTION_LENGTH = 5000


def _strip_title(value: str | None) -> str | None:
    if value is None:
        return value
    normalized = value.strip()
    if not normalized:
        raise ValueError('Title is required.')
    return normalized


class CreateTaskRequest(BaseModel):
    title: str = Field(max_length=MAX_TITLE_LENGTH)
    description: str = Field(default='', max_length=MAX_DESCRIPTION_LENGTH)
    assigned_to: int

    @field_validator('title')
    @classmethod
    def validate_title(cls, value: str) -> str:
        return _strip_title(value)


class UpdateTaskRequest(BaseModel):
    title: str | None = Field(default=None, max_length=MAX_TITLE_LENGTH)
    description: str | None = Field(default=None, max_length=MAX_DESCRIPTION_LENGTH)
    assigned_to: int | None = None
    status: TaskStatus | None = None

    class Config:
        extra = 'forbid'

    @field_validator('title')
    @classmethod
    def validate_title(cls, value: str | None) -> str | None:
        return _strip_title(value)


class StatusUpdateRequest(BaseModel):
    status: TaskStatus


class TaskResponse(BaseModel):
    id: int
    title: str
    description: str
    assigned_to: int
    assignee: UserSummaryResponse | None = None
    status: TaskStatus
    verified: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


def to_task_response(task: Task, assignee=None) -> TaskResponse:
    response = TaskResponse.model_validate(task)
    if assignee is not None:
        response.assignee = UserSummaryResponse.model_validate(assignee)
    return response


def _view_response(view: TaskView) -> TaskResponse:
    return to_task_response(view.task, view.assignee)


@router.post('/tasks', response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
def create_task(
    data: CreateTaskRequest,
    context: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    task = TaskLifecycleManager(db).create_task(context, data.title, data.description, data.assigned_to)
    return to_task_response(task)


@router.get('/tasks', response_model=list[TaskResponse])
def list_tasks(context: AuthContext = Depends(get_auth_context), db: Session = Depends(get_db)):
    return [_view_response(view) for view in TaskLifecycleManager(db).list_tasks(context)]


@router.put('/tasks/{task_id}', response_model=TaskResponse)
def update_task(
    task_id: int,
    data: UpdateTaskRequest,
    context: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    patch = data.model_dump(exclude_unset=True)
    task = TaskLifecycleManager(db).update_task(context, task_id, patch)
    return to_task_response(task)


@router.put('/tasks/{task_id}/status', response_model=TaskResponse)
@router.put('/status/{task_id}', response_model=TaskResponse, include_in_schema=False)
def set_task_status(
    task_id: int,
    data: StatusUpdateRequest,
    context: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    task = TaskLifecycleManager(db).set_status(context, task_id, data.status)
    return to_task_response(task)


@router.put('/tasks/{task_id}/verify', response_model=TaskResponse)
@router.put('/verify/{task_id}', response_model=TaskResponse, include_in_schema=False)
def verify_task(
    task_id: int,
    context: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    task = TaskLifecycleManager(db).verify_task(context, task_id)
    return to_task_response(task)


@router.delete('/tasks/{task_id}', response_model=MessageResponse)
def delete_task(
    task_id: int,
    context: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    TaskLifecycleManager(db).delete_task(context, task_id)
    return MessageResponse(message='Deleted successfully')
