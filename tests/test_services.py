from __future__ import annotations

from decimal import Decimal

import pytest

from expense_manager.models.expense import Expense
from expense_manager.models.member import Member
from expense_manager.models.workspace import Workspace
from expense_manager.services import cascade_service, totals_service
from expense_manager.services.errors import EntityNotFoundError, OrphanedMemberError


def make_tree(session):
    ws = Workspace(name="Home", amount=1000)
    session.add(ws)
    session.flush()
    member = Member(name="Asha", contact_number="555", workspace_id=ws.id)
    session.add(member)
    session.flush()
    return ws, member


def add_expense(session, member, amount, description="item"):
    expense = Expense(member_id=member.id, description=description, amount=amount)
    session.add(expense)
    session.flush()
    totals_service.on_expense_created(session, expense)
    return expense


def test_created_and_deleted_expenses_move_total(db_session):
    ws, member = make_tree(db_session)
    lunch = add_expense(db_session, member, 50, "lunch")
    add_expense(db_session, member, 25.5, "coffee")
    db_session.refresh(ws)
    assert ws.total_expenses == Decimal("75.50")

    totals_service.on_expense_deleted(db_session, lunch)
    db_session.delete(lunch)
    db_session.flush()
    db_session.refresh(ws)
    assert ws.total_expenses == Decimal("25.50")
    assert totals_service.sum_workspace_expenses(db_session, ws.id) == Decimal("25.50")


def test_amount_change_applies_delta(db_session):
    ws, member = make_tree(db_session)
    expense = add_expense(db_session, member, 100)
    expense.amount = 40
    db_session.add(expense)
    db_session.flush()
    totals_service.on_expense_amount_changed(db_session, expense, 100)
    db_session.refresh(ws)
    assert ws.total_expenses == 40


def test_missing_member_is_not_found(db_session):
    with pytest.raises(EntityNotFoundError):
        totals_service.resolve_workspace_id(db_session, 404)


def test_orphaned_member_raises_and_logs(db_session, caplog):
    member = Member(name="Lost", contact_number="0", workspace_id=77)
    db_session.add(member)
    db_session.flush()
    expense = Expense(member_id=member.id, description="x", amount=5)
    db_session.add(expense)
    db_session.flush()

    with caplog.at_level("ERROR"):
        with pytest.raises(OrphanedMemberError) as info:
            totals_service.on_expense_created(db_session, expense)
    assert info.value.workspace_id == 77
    assert "no resolvable workspace" in caplog.text


def test_adjust_missing_workspace(db_session):
    with pytest.raises(EntityNotFoundError):
        totals_service.adjust_workspace_total(db_session, 999, 10)


def test_recalculate_workspace_total_only_counts_own_members(db_session):
    ws, member = make_tree(db_session)
    other_ws, other_member = make_tree(db_session)
    add_expense(db_session, member, 10)
    add_expense(db_session, other_member, 99)
    ws.total_expenses = -1
    db_session.add(ws)
    db_session.flush()

    assert totals_service.recalculate_workspace_total(db_session, ws.id).total_expenses == 10
    assert totals_service.recalculate_workspace_total(db_session, other_ws.id).total_expenses == 99


def test_recalculate_member_total(db_session):
    _, member = make_tree(db_session)
    add_expense(db_session, member, 3)
    add_expense(db_session, member, 4)
    assert member.total_expenses == 0
    assert totals_service.recalculate_member_total(db_session, member.id).total_expenses == 7


def test_delete_workspace_removes_subtree(db_session):
    ws, member = make_tree(db_session)
    expense = add_expense(db_session, member, 12)
    ws_id, member_id, expense_id = ws.id, member.id, expense.id

    cascade_service.delete_workspace(db_session, ws_id)
    db_session.commit()

    assert db_session.get(Workspace, ws_id) is None
    assert db_session.get(Member, member_id) is None
    assert db_session.get(Expense, expense_id) is None


def test_delete_workspace_without_members(db_session):
    ws = Workspace(name="Empty", amount=0)
    db_session.add(ws)
    db_session.flush()
    cascade_service.delete_workspace(db_session, ws.id)
    assert db_session.get(Workspace, ws.id) is None


def test_delete_missing_workspace(db_session):
    with pytest.raises(EntityNotFoundError):
        cascade_service.delete_workspace(db_session, 1)


def test_delete_member_subtracts_its_expenses(db_session):
    ws, member = make_tree(db_session)
    other = Member(name="Ben", contact_number="1", workspace_id=ws.id)
    db_session.add(other)
    db_session.flush()
    add_expense(db_session, member, 30)
    add_expense(db_session, other, 5)

    cascade_service.delete_member(db_session, member.id)
    db_session.refresh(ws)
    assert ws.total_expenses == 5
    assert totals_service.sum_member_expenses(db_session, member.id) == 0


def test_fractional_amounts_cancel_exactly(db_session):
    ws, member = make_tree(db_session)
    first = add_expense(db_session, member, Decimal("0.10"))
    second = add_expense(db_session, member, Decimal("0.20"))
    db_session.refresh(ws)
    assert ws.total_expenses == Decimal("0.30")

    for expense in (first, second):
        totals_service.on_expense_deleted(db_session, expense)
        db_session.delete(expense)
        db_session.flush()
    db_session.refresh(ws)
    assert ws.total_expenses == 0


def test_delete_orphaned_member_skips_total(db_session, caplog):
    member = Member(name="Lost", contact_number="0", workspace_id=77)
    db_session.add(member)
    db_session.flush()
    db_session.add(Expense(member_id=member.id, description="x", amount=Decimal("5.00")))
    db_session.flush()

    with caplog.at_level("WARNING"):
        cascade_service.delete_member(db_session, member.id)
    assert db_session.get(Member, member.id) is None
    assert totals_service.sum_member_expenses(db_session, member.id) == 0
    assert "not subtracted from any total" in caplog.text
