import logging
from contextlib import contextmanager
from typing import List, Optional
from fastapi import APIRouter, Request, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select
from expense_manager.db import get_session
from expense_manager.models.workspace import Workspace
from expense_manager.models.member import Member
from expense_manager import schemas
from expense_manager.services import cascade_service, totals_service
from expense_manager.services.errors import EntityConflictError, EntityNotFoundError, OrphanedMemberError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


def require_user(request: Request):
    user = request.session.get("user")
    if not user:
        raise HTTPException(status_code=401, detail="Login required")
    return user


@contextmanager
def handle_errors(message: str, session: Optional[Session] = None):
    """Map domain errors to their status codes and store failures to a 500 carrying ``message``.

    With a ``session``, the block is committed on success so a failing commit
    is reported like any other store error.
    """
    try:
        yield
        if session is not None:
            session.commit()
    except EntityNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except (OrphanedMemberError, EntityConflictError) as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except SQLAlchemyError as exc:
        logger.exception("%s", message)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=message) from exc


def get_workspace_or_404(s: Session, workspace_id: int) -> Workspace:
    workspace = s.get(Workspace, workspace_id)
    if workspace is None:
        raise EntityNotFoundError("Workspace not found")
    return workspace


def to_read(s: Session, workspace: Workspace) -> schemas.WorkspaceRead:
    members = s.exec(select(Member).where(Member.workspace_id == workspace.id).order_by(Member.id)).all()
    data = schemas.WorkspaceRead.model_validate(workspace)
    data.members = [schemas.MemberRead.model_validate(m) for m in members]
    return data


@router.post("/workspaces", response_model=schemas.WorkspaceRead, status_code=status.HTTP_201_CREATED)
def create_workspace(workspace_in: schemas.WorkspaceCreate, s: Session = Depends(get_session), current_user=Depends(require_user)):
    with handle_errors("Error adding workspace", s):
        workspace = Workspace(**workspace_in.model_dump(exclude_none=True))
        s.add(workspace); s.flush(); s.refresh(workspace)
        logger.info("created workspace %s (%s)", workspace.id, workspace.name)
        return to_read(s, workspace)


@router.get("/workspaces", response_model=List[schemas.WorkspaceRead])
def list_workspaces(s: Session = Depends(get_session), current_user=Depends(require_user)):
    with handle_errors("Error fetching workspaces", s):
        workspaces = s.exec(select(Workspace).order_by(Workspace.id)).all()
        return [to_read(s, w) for w in workspaces]


@router.get("/workspaces/{workspace_id}", response_model=schemas.WorkspaceRead)
def get_workspace(workspace_id: int, s: Session = Depends(get_session), current_user=Depends(require_user)):
    with handle_errors("Error fetching workspace", s):
        return to_read(s, get_workspace_or_404(s, workspace_id))


@router.put("/workspaces/{workspace_id}", response_model=schemas.WorkspaceRead)
def update_workspace(workspace_id: int, update_in: schemas.WorkspaceUpdate, s: Session = Depends(get_session), current_user=Depends(require_user)):
    with handle_errors("Error updating workspace", s):
        workspace = get_workspace_or_404(s, workspace_id)
        for field, value in update_in.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(workspace, field, value)
        s.add(workspace); s.flush(); s.refresh(workspace)
        return to_read(s, workspace)


@router.delete("/workspaces/{workspace_id}", response_model=schemas.Message)
def delete_workspace(workspace_id: int, s: Session = Depends(get_session), current_user=Depends(require_user)):
    with handle_errors("Error deleting workspace", s):
        cascade_service.delete_workspace(s, workspace_id)
    return {"message": "Workspace deleted successfully"}


@router.post("/workspaces/{workspace_id}/recalculate", response_model=schemas.WorkspaceRead)
def recalculate_workspace(workspace_id: int, s: Session = Depends(get_session), current_user=Depends(require_user)):
    with handle_errors("Error recalculating workspace total", s):
        workspace = totals_service.recalculate_workspace_total(s, workspace_id)
        return to_read(s, workspace)


@router.get("/workspaces/{workspace_id}/members", response_model=List[schemas.MemberRead])
def list_members(workspace_id: int, s: Session = Depends(get_session), current_user=Depends(require_user)):
    with handle_errors("Error fetching members", s):
        return s.exec(select(Member).where(Member.workspace_id == workspace_id).order_by(Member.id)).all()
