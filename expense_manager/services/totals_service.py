# expense_manager/services/totals_service.py
import logging
from decimal import Decimal
from sqlalchemy import func, update
from sqlmodel import Session, select
from expense_manager.models.base import to_cents
from expense_manager.models.workspace import Workspace
from expense_manager.models.member import Member
from expense_manager.models.expense import Expense
from expense_manager.services.errors import EntityNotFoundError, OrphanedMemberError

logger = logging.getLogger(__name__)


def resolve_workspace_id(session: Session, member_id: int) -> int:
    member = session.get(Member, member_id)
    if member is None:
        raise EntityNotFoundError(f"Member {member_id} not found")
    if member.workspace_id is None or session.get(Workspace, member.workspace_id) is None:
        logger.error("member %s has no resolvable workspace (workspace_id=%s)", member_id, member.workspace_id)
        raise OrphanedMemberError(member_id, member.workspace_id)
    return member.workspace_id


def adjust_workspace_total(session: Session, workspace_id: int, delta) -> None:
    delta = to_cents(delta)
    # atomic in the store: SET total_expenses = total_expenses + :delta
    stmt = (
        update(Workspace)
        .where(Workspace.id == workspace_id)
        .values(total_expenses=Workspace.total_expenses + delta)
    )
    result = session.exec(stmt)
    if result.rowcount == 0:
        raise EntityNotFoundError(f"Workspace {workspace_id} not found")
    logger.debug("workspace %s total adjusted by %s", workspace_id, delta)


def on_expense_created(session: Session, expense: Expense) -> None:
    workspace_id = resolve_workspace_id(session, expense.member_id)
    adjust_workspace_total(session, workspace_id, expense.amount)


def on_expense_deleted(session: Session, expense: Expense) -> None:
    """Must run while the expense row still exists, its amount is read here."""
    workspace_id = resolve_workspace_id(session, expense.member_id)
    adjust_workspace_total(session, workspace_id, -expense.amount)


def on_expense_amount_changed(session: Session, expense: Expense, previous_amount) -> None:
    delta = to_cents(expense.amount) - to_cents(previous_amount)
    if delta == 0:
        return
    workspace_id = resolve_workspace_id(session, expense.member_id)
    adjust_workspace_total(session, workspace_id, delta)


def sum_member_expenses(session: Session, member_id: int) -> Decimal:
    stmt = select(func.coalesce(func.sum(Expense.amount), 0)).where(Expense.member_id == member_id)
    return to_cents(session.exec(stmt).one())


def sum_workspace_expenses(session: Session, workspace_id: int) -> Decimal:
    stmt = (
        select(func.coalesce(func.sum(Expense.amount), 0))
        .select_from(Expense)
        .join(Member, Member.id == Expense.member_id)
        .where(Member.workspace_id == workspace_id)
    )
    return to_cents(session.exec(stmt).one())


def recalculate_workspace_total(session: Session, workspace_id: int) -> Workspace:
    workspace = session.get(Workspace, workspace_id)
    if workspace is None:
        raise EntityNotFoundError(f"Workspace {workspace_id} not found")
    actual = sum_workspace_expenses(session, workspace_id)
    if actual != to_cents(workspace.total_expenses):
        logger.warning("workspace %s total drifted: cached=%s actual=%s", workspace_id, workspace.total_expenses, actual)
    workspace.total_expenses = actual
    session.add(workspace); session.flush(); session.refresh(workspace)
    return workspace


def recalculate_member_total(session: Session, member_id: int) -> Member:
    member = session.get(Member, member_id)
    if member is None:
        raise EntityNotFoundError(f"Member {member_id} not found")
    member.total_expenses = sum_member_expenses(session, member_id)
    session.add(member); session.flush(); session.refresh(member)
    return member
