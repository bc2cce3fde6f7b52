"""Tests for approval chain resolution."""

from datetime import datetime, timedelta

import pytest

from logiflow.core.approval.chain import ApprovalLevel, ChainResolver
from tests.factories import create_workflow_rule


@pytest.fixture
def resolver(db_session):
    return ChainResolver(db_session)


@pytest.fixture
def mrf_rules(db_session):
    """Supervisor up to 2000, manager 2000-10000, director above 10000."""
    return [
        create_workflow_rule(db_session, min_amount=0, max_amount=2000, approver_role="supervisor", sla_hours=24),
        create_workflow_rule(db_session, min_amount=2000, max_amount=10000, approver_role="manager", sla_hours=48),
        create_workflow_rule(db_session, min_amount=10000, max_amount=None, approver_role="director", sla_hours=72),
    ]


class TestResolve:

    def test_single_band(self, resolver, mrf_rules):
        levels = resolver.resolve("mrf", 500)
        assert levels == [ApprovalLevel(position=1, approver_role="supervisor", sla_hours=24)]

    def test_boundary_amount_matches_both_bands(self, resolver, mrf_rules):
        levels = resolver.resolve("mrf", 2000)
        assert [(l.position, l.approver_role, l.sla_hours) for l in levels] == [
            (1, "supervisor", 24),
            (2, "manager", 48),
        ]

    def test_open_ended_band(self, resolver, mrf_rules):
        levels = resolver.resolve("mrf", 1_000_000)
        assert [l.approver_role for l in levels] == ["director"]

    def test_levels_ordered_by_min_amount(self, db_session, resolver):
        create_workflow_rule(db_session, document_type="jo", min_amount=500, approver_role="manager")
        create_workflow_rule(db_session, document_type="jo", min_amount=0, approver_role="coordinator")
        create_workflow_rule(db_session, document_type="jo", min_amount=100, approver_role="supervisor")

        levels = resolver.resolve("jo", 1000)

        assert [l.approver_role for l in levels] == ["coordinator", "supervisor", "manager"]
        assert [l.position for l in levels] == [1, 2, 3]

    def test_equal_min_amount_ordered_by_creation(self, db_session, resolver):
        earlier = datetime(2026, 1, 1)
        create_workflow_rule(db_session, document_type="jo", approver_role="second", created_at=earlier + timedelta(hours=1))
        create_workflow_rule(db_session, document_type="jo", approver_role="first", created_at=earlier)

        assert [l.approver_role for l in resolver.resolve("jo", 10)] == ["first", "second"]

    def test_no_matching_rules_is_empty(self, resolver, mrf_rules):
        assert resolver.resolve("mirv", 500) == []

    def test_amount_below_every_band_is_empty(self, db_session, resolver):
        create_workflow_rule(db_session, document_type="jo", min_amount=100, approver_role="manager")
        assert resolver.resolve("jo", 50) == []


class TestRequiredApproval:

    def test_returns_highest_level(self, resolver, mrf_rules):
        level = resolver.required_approval("mrf", 2000)
        assert level.approver_role == "manager"
        assert level.position == 2

    def test_none_when_unconfigured(self, resolver):
        assert resolver.required_approval("mrf", 10) is None


class TestSlaHoursForRole:

    def test_picks_highest_min_amount_rule(self, db_session, resolver):
        create_workflow_rule(db_session, document_type="mirv", min_amount=50000, max_amount=100000, approver_role="manager", sla_hours=24)
        create_workflow_rule(db_session, document_type="mirv", min_amount=100000, max_amount=500000, approver_role="manager", sla_hours=48)

        assert resolver.sla_hours_for_role("mirv", "manager") == 48

    def test_unknown_role(self, resolver, mrf_rules):
        assert resolver.sla_hours_for_role("mrf", "auditor") is None


def test_level_to_dict():
    level = ApprovalLevel(position=2, approver_role="manager", sla_hours=48)
    assert level.to_dict() == {"position": 2, "approver_role": "manager", "sla_hours": 48}
