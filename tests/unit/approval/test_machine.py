"""Tests for the approval step state machine."""

import uuid
from datetime import datetime

import pytest

from logiflow.core.approval.chain import ApprovalLevel
from logiflow.core.approval.errors import ConflictError, NotFoundError
from logiflow.core.approval.machine import StepStateMachine
from tests.factories import create_employee


NOW = datetime(2026, 3, 10, 9, 0)

LEVELS = [
    ApprovalLevel(position=1, approver_role="supervisor", sla_hours=24),
    ApprovalLevel(position=2, approver_role="manager", sla_hours=48),
    ApprovalLevel(position=3, approver_role="director", sla_hours=72),
]


@pytest.fixture
def machine(db_session):
    return StepStateMachine(db_session, clock=lambda: NOW)


@pytest.fixture
def document_id():
    return uuid.uuid4()


@pytest.fixture
def actor(db_session):
    return create_employee(db_session, role="supervisor")


def _statuses(machine, document_id):
    return [(s.level, s.status) for s in machine.get_steps("mrf", document_id)]


class TestCreateLevels:

    def test_creates_pending_steps(self, machine, document_id):
        assert machine.create_levels("mrf", document_id, LEVELS) == 3

        steps = machine.get_steps("mrf", document_id)
        assert [(s.level, s.approver_role, s.status) for s in steps] == [
            (1, "supervisor", "pending"),
            (2, "manager", "pending"),
            (3, "director", "pending"),
        ]
        assert all(s.created_at == NOW for s in steps)

    def test_idempotent(self, machine, document_id):
        machine.create_levels("mrf", document_id, LEVELS)
        first = [(s.id, s.level, s.status) for s in machine.get_steps("mrf", document_id)]

        assert machine.create_levels("mrf", document_id, LEVELS) == 0

        second = [(s.id, s.level, s.status) for s in machine.get_steps("mrf", document_id)]
        assert first == second

    def test_fills_only_missing_levels(self, machine, document_id):
        machine.create_levels("mrf", document_id, LEVELS[:1])
        assert machine.create_levels("mrf", document_id, LEVELS) == 2
        assert len(machine.get_steps("mrf", document_id)) == 3

    def test_steps_are_scoped_by_document_type(self, machine, document_id):
        machine.create_levels("mrf", document_id, LEVELS[:1])
        machine.create_levels("jo", document_id, LEVELS[:2])

        assert len(machine.get_steps("mrf", document_id)) == 1
        assert len(machine.get_steps("jo", document_id)) == 2


class TestFindActionableStep:

    def test_lowest_pending_level(self, machine, document_id):
        machine.create_levels("mrf", document_id, LEVELS)
        assert machine.find_actionable_step("mrf", document_id).level == 1

    def test_none_before_submission(self, machine, document_id):
        assert machine.find_actionable_step("mrf", document_id) is None


class TestApprove:

    def test_approve_returns_next_step(self, machine, document_id, actor):
        machine.create_levels("mrf", document_id, LEVELS)
        step = machine.find_actionable_step("mrf", document_id)

        next_step = machine.approve(step.id, actor.id, "Looks good")

        assert next_step.level == 2
        assert step.status == "approved"
        assert step.approver_id == actor.id
        assert step.notes == "Looks good"
        assert step.decided_at == NOW

    def test_approving_last_level_returns_none(self, machine, document_id, actor):
        machine.create_levels("mrf", document_id, LEVELS[:1])
        step = machine.find_actionable_step("mrf", document_id)

        assert machine.approve(step.id, actor.id) is None
        assert machine.find_actionable_step("mrf", document_id) is None

    def test_at_most_one_pending_step_is_actionable(self, machine, document_id, actor):
        machine.create_levels("mrf", document_id, LEVELS)
        step = machine.find_actionable_step("mrf", document_id)
        machine.approve(step.id, actor.id)

        assert _statuses(machine, document_id) == [(1, "approved"), (2, "pending"), (3, "pending")]
        assert machine.find_actionable_step("mrf", document_id).level == 2

    def test_approving_decided_step_conflicts(self, machine, document_id, actor):
        machine.create_levels("mrf", document_id, LEVELS)
        step = machine.find_actionable_step("mrf", document_id)
        machine.approve(step.id, actor.id)

        with pytest.raises(ConflictError):
            machine.approve(step.id, actor.id)

    def test_conflict_reports_current_status(self, machine, document_id, actor):
        machine.create_levels("mrf", document_id, LEVELS)
        step = machine.find_actionable_step("mrf", document_id)
        machine.reject(step.id, actor.id)

        with pytest.raises(ConflictError) as excinfo:
            machine.approve(step.id, actor.id)

        assert excinfo.value.current_status == "rejected"
        assert _statuses(machine, document_id)[0] == (1, "rejected")

    def test_unknown_step(self, machine, actor):
        with pytest.raises(NotFoundError):
            machine.approve(uuid.uuid4(), actor.id)


class TestReject:

    def test_reject_skips_higher_levels(self, machine, document_id, actor):
        machine.create_levels("mrf", document_id, LEVELS)
        step = machine.find_actionable_step("mrf", document_id)

        skipped = machine.reject(step.id, actor.id, "Over budget")

        assert skipped == 2
        assert _statuses(machine, document_id) == [(1, "rejected"), (2, "skipped"), (3, "skipped")]
        assert machine.find_actionable_step("mrf", document_id) is None

    def test_reject_mid_chain_keeps_approved_levels(self, machine, document_id, actor):
        machine.create_levels("mrf", document_id, LEVELS)
        first = machine.find_actionable_step("mrf", document_id)
        second = machine.approve(first.id, actor.id)

        assert machine.reject(second.id, actor.id) == 1
        assert _statuses(machine, document_id) == [(1, "approved"), (2, "rejected"), (3, "skipped")]

    def test_skipped_step_cannot_be_approved(self, machine, document_id, actor):
        machine.create_levels("mrf", document_id, LEVELS)
        steps = machine.get_steps("mrf", document_id)
        machine.reject(steps[0].id, actor.id)

        with pytest.raises(ConflictError):
            machine.approve(steps[1].id, actor.id)

    def test_reject_does_not_touch_other_documents(self, machine, document_id, actor):
        other_id = uuid.uuid4()
        machine.create_levels("mrf", document_id, LEVELS)
        machine.create_levels("mrf", other_id, LEVELS)

        machine.reject(machine.find_actionable_step("mrf", document_id).id, actor.id)

        assert _statuses(machine, other_id) == [(1, "pending"), (2, "pending"), (3, "pending")]
