import logging
from typing import List
from fastapi import APIRouter, Depends, status
from sqlmodel import Session, select
from expense_manager.db import get_session
from expense_manager.models.expense import Expense
from expense_manager import schemas
from expense_manager.routes.workspace import require_user, handle_errors
from expense_manager.routes.member import get_member_or_404
from expense_manager.services import totals_service
from expense_manager.services.errors import EntityNotFoundError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


def get_expense_or_404(s: Session, expense_id: int) -> Expense:
    expense = s.get(Expense, expense_id)
    if expense is None:
        raise EntityNotFoundError("Expense not found")
    return expense


@router.post("/members/{member_id}/expenses", response_model=schemas.ExpenseRead, status_code=status.HTTP_201_CREATED)
def add_expense(member_id: int, expense_in: schemas.ExpenseCreate, s: Session = Depends(get_session), current_user=Depends(require_user)):
    with handle_errors("Error adding expense", s):
        get_member_or_404(s, member_id)
        e = Expense(member_id=member_id, **expense_in.model_dump(exclude_none=True))
        s.add(e); s.flush()
        totals_service.on_expense_created(s, e)
        s.refresh(e)
        logger.info("added expense %s (%s) to member %s", e.id, e.amount, member_id)
        return e


@router.get("/members/{member_id}/expenses", response_model=List[schemas.ExpenseRead])
def list_expenses(member_id: int, s: Session = Depends(get_session), current_user=Depends(require_user)):
    with handle_errors("Error fetching expenses", s):
        return s.exec(select(Expense).where(Expense.member_id == member_id).order_by(Expense.date, Expense.id)).all()


@router.get("/expenses/{expense_id}", response_model=schemas.ExpenseRead)
def get_expense(expense_id: int, s: Session = Depends(get_session), current_user=Depends(require_user)):
    with handle_errors("Error fetching expense", s):
        return get_expense_or_404(s, expense_id)


@router.put("/expenses/{expense_id}", response_model=schemas.ExpenseRead)
def update_expense(expense_id: int, update_in: schemas.ExpenseUpdate, s: Session = Depends(get_session), current_user=Depends(require_user)):
    with handle_errors("Error updating expense", s):
        e = get_expense_or_404(s, expense_id)
        previous_amount = e.amount
        for field, value in update_in.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(e, field, value)
        s.add(e); s.flush()
        totals_service.on_expense_amount_changed(s, e, previous_amount)
        s.refresh(e)
        return e


@router.delete("/expenses/{expense_id}", response_model=schemas.Message)
def delete_expense(expense_id: int, s: Session = Depends(get_session), current_user=Depends(require_user)):
    with handle_errors("Error deleting expense", s):
        e = get_expense_or_404(s, expense_id)
        # the decrement reads the amount, so it has to happen before the delete
        totals_service.on_expense_deleted(s, e)
        s.delete(e)
        s.flush()
        logger.info("deleted expense %s", expense_id)
    return {"message": "Expense deleted successfully"}
