import logging
from fastapi import APIRouter, Depends, status
from sqlmodel import Session
from expense_manager.db import get_session
from expense_manager.models.member import Member
from expense_manager import schemas
from expense_manager.routes.workspace import require_user, handle_errors, get_workspace_or_404
from expense_manager.services import cascade_service, totals_service
from expense_manager.services.errors import EntityNotFoundError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


def get_member_or_404(s: Session, member_id: int) -> Member:
    member = s.get(Member, member_id)
    if member is None:
        raise EntityNotFoundError("Member not found")
    return member


@router.post("/members", response_model=schemas.MemberRead, status_code=status.HTTP_201_CREATED)
def create_member(member_in: schemas.MemberCreate, s: Session = Depends(get_session), current_user=Depends(require_user)):
    with handle_errors("Error adding member", s):
        get_workspace_or_404(s, member_in.workspace_id)
        member = Member(**member_in.model_dump(exclude_none=True))
        s.add(member); s.flush(); s.refresh(member)
        logger.info("added member %s to workspace %s", member.id, member.workspace_id)
        return member


@router.get("/members/{member_id}", response_model=schemas.MemberRead)
def get_member(member_id: int, s: Session = Depends(get_session), current_user=Depends(require_user)):
    with handle_errors("Error fetching member", s):
        return get_member_or_404(s, member_id)


@router.put("/members/{member_id}", response_model=schemas.MemberRead)
def update_member(member_id: int, update_in: schemas.MemberUpdate, s: Session = Depends(get_session), current_user=Depends(require_user)):
    with handle_errors("Error updating member", s):
        member = get_member_or_404(s, member_id)
        for field, value in update_in.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(member, field, value)
        s.add(member); s.flush(); s.refresh(member)
        return member


@router.delete("/members/{member_id}", response_model=schemas.Message)
def delete_member(member_id: int, s: Session = Depends(get_session), current_user=Depends(require_user)):
    with handle_errors("Error deleting member", s):
        cascade_service.delete_member(s, member_id)
    return {"message": "Member deleted successfully"}


@router.put("/members/{member_id}/total-expense", response_model=schemas.MemberRead)
def set_total_expense(member_id: int, body: schemas.TotalExpenseUpdate, s: Session = Depends(get_session), current_user=Depends(require_user)):
    """Overwrite the member's total as sent; it is not checked against the member's expenses."""
    with handle_errors("Error updating total expense", s):
        member = get_member_or_404(s, member_id)
        member.total_expenses = body.total_expense
        s.add(member); s.flush(); s.refresh(member)
        return member


@router.post("/members/{member_id}/total-expense/recalculate", response_model=schemas.MemberRead)
def recalculate_total_expense(member_id: int, s: Session = Depends(get_session), current_user=Depends(require_user)):
    with handle_errors("Error recalculating total expense", s):
        return totals_service.recalculate_member_total(s, member_id)
