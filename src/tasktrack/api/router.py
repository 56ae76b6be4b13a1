"""REST API router."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tasktrack import __version__
from tasktrack.api.deps import (
    get_current_identity,
    get_db_session,
    get_notifier,
    get_session_factory,
)
from tasktrack.api.schemas import HealthResponse, MessageResponse, TaskMutationResponse
from tasktrack.auth import AuthService, Identity
from tasktrack.engine import (
    DashboardAggregator,
    NotFoundError,
    TaskEngine,
    ValidationError,
)
from tasktrack.models import (
    DashboardData,
    Priority,
    SortField,
    SortOrder,
    Task,
    TaskCreate,
    TaskFilter,
    TaskStatus,
    TaskUpdate,
    UserSummary,
)
from tasktrack.notify import ChangeNotifier

router = APIRouter(prefix="/v1")


# ============================================================================
# Health
# ============================================================================


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request):
    """Health check endpoint."""
    registry = getattr(request.app.state, "registry", None)
    return HealthResponse(
        status="healthy",
        version=__version__,
        connections=registry.connection_count() if registry else 0,
    )


# ============================================================================
# Users
# ============================================================================


@router.get("/users", response_model=list[UserSummary])
async def list_users(
    session: AsyncSession = Depends(get_db_session),
    identity: Identity = Depends(get_current_identity),
):
    """All users, for assignment pickers."""
    return await AuthService(session).list_users()


# ============================================================================
# Tasks
# ============================================================================


@router.post("/tasks", response_model=TaskMutationResponse, status_code=201)
async def create_task(
    request: TaskCreate,
    session: AsyncSession = Depends(get_db_session),
    identity: Identity = Depends(get_current_identity),
    notifier: ChangeNotifier = Depends(get_notifier),
):
    """Create a new task."""
    engine = TaskEngine(session)

    try:
        task = await engine.create_task(request, identity.user_id)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)

    # Commit before announcing, so listeners that re-read see the task.
    await session.commit()
    notifier.task_created(task)

    return TaskMutationResponse(message="Task created successfully", task=task)


@router.get("/tasks", response_model=list[Task])
async def list_tasks(
    status: Optional[TaskStatus] = Query(None),
    priority: Optional[Priority] = Query(None),
    sort_by: SortField = Query(SortField.CREATED_AT),
    order: SortOrder = Query(SortOrder.DESC),
    session: AsyncSession = Depends(get_db_session),
    identity: Identity = Depends(get_current_identity),
):
    """List tasks with optional filtering."""
    engine = TaskEngine(session)
    filters = TaskFilter(status=status, priority=priority, sort_by=sort_by, order=order)
    return await engine.list_tasks(filters)


@router.get("/tasks/dashboard", response_model=DashboardData)
async def get_dashboard(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    identity: Identity = Depends(get_current_identity),
):
    """Assigned, created and overdue tasks for the caller."""
    return await DashboardAggregator(session_factory).get_dashboard(identity.user_id)


@router.get("/tasks/{task_id}", response_model=Task)
async def get_task(
    task_id: str,
    session: AsyncSession = Depends(get_db_session),
    identity: Identity = Depends(get_current_identity),
):
    """Get a task by ID."""
    engine = TaskEngine(session)

    try:
        return await engine.get_task(task_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)


@router.put("/tasks/{task_id}", response_model=TaskMutationResponse)
async def update_task(
    task_id: str,
    request: TaskUpdate,
    session: AsyncSession = Depends(get_db_session),
    identity: Identity = Depends(get_current_identity),
    notifier: ChangeNotifier = Depends(get_notifier),
):
    """Partially update a task."""
    engine = TaskEngine(session)

    try:
        result = await engine.update_task(task_id, request, identity.user_id)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)

    await session.commit()
    notifier.task_updated(result)

    return TaskMutationResponse(message="Task updated successfully", task=result.task)


@router.delete("/tasks/{task_id}", response_model=MessageResponse)
async def delete_task(
    task_id: str,
    session: AsyncSession = Depends(get_db_session),
    identity: Identity = Depends(get_current_identity),
    notifier: ChangeNotifier = Depends(get_notifier),
):
    """Delete a task."""
    engine = TaskEngine(session)

    try:
        await engine.delete_task(task_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)

    await session.commit()
    notifier.task_deleted(task_id)

    return MessageResponse(message="Task deleted successfully")
