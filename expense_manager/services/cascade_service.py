# expense_manager/services/cascade_service.py
import logging
from typing import List
from sqlalchemy import delete
from sqlmodel import Session, select
from expense_manager.models.workspace import Workspace
from expense_manager.models.member import Member
from expense_manager.models.expense import Expense
from expense_manager.services.errors import EntityNotFoundError
from expense_manager.services.totals_service import adjust_workspace_total, sum_member_expenses

logger = logging.getLogger(__name__)


def delete_workspace(session: Session, workspace_id: int) -> None:
    """Delete a workspace together with its members and their expenses.

    Expenses go first, then members, then the workspace, so no step leaves
    rows pointing at something already removed. The caller's transaction
    makes the three deletes one unit.
    """
    workspace = session.get(Workspace, workspace_id)
    if workspace is None:
        raise EntityNotFoundError(f"Workspace {workspace_id} not found")
    member_ids: List[int] = list(session.exec(select(Member.id).where(Member.workspace_id == workspace_id)).all())
    expenses_deleted = 0
    if member_ids:
        result = session.exec(delete(Expense).where(Expense.member_id.in_(member_ids)))
        expenses_deleted = result.rowcount
        session.exec(delete(Member).where(Member.workspace_id == workspace_id))
    session.delete(workspace)
    session.flush()
    logger.info(
        "deleted workspace %s with %d members and %d expenses",
        workspace_id, len(member_ids), expenses_deleted,
    )


def delete_member(session: Session, member_id: int) -> None:
    member = session.get(Member, member_id)
    if member is None:
        raise EntityNotFoundError(f"Member {member_id} not found")
    spent = sum_member_expenses(session, member_id)
    if spent and member.workspace_id is not None and session.get(Workspace, member.workspace_id) is not None:
        adjust_workspace_total(session, member.workspace_id, -spent)
    elif spent:
        # an orphaned member's expenses are in no workspace total, so deleting it stays allowed
        logger.warning("member %s has no workspace, %s in expenses not subtracted from any total", member_id, spent)
    session.exec(delete(Expense).where(Expense.member_id == member_id))
    session.delete(member)
    session.flush()
    logger.info("deleted member %s", member_id)
