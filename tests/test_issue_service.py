"""Integration tests for the issue lifecycle service against a real database."""

import time
from datetime import datetime, timezone

import pytest

from campus_issues.db.audit_service import AuditService
from campus_issues.enums import Department, IssueStatus, Priority
from campus_issues.errors import ForbiddenError, NotFoundError, ValidationError
from campus_issues.issues.schemas import (
    IssueCreate,
    IssueFilters,
    IssueUpdate,
    Location,
)
from campus_issues.issues.services import DEFAULT_RESOLUTION_NOTES, IssueService


def make_issue_create(
    title="Projector not working in 101",
    description="the projector bulb is broken",
    building="CSE",
    room="101",
) -> IssueCreate:
    return IssueCreate(
        title=title,
        description=description,
        location=Location(building=building, room=room),
    )


@pytest.fixture
def service(db_session) -> IssueService:
    return IssueService(db_session)


class TestCreate:
    def test_triage_fields_populated(self, service, student):
        issue = service.create(student, make_issue_create())

        assert issue.category == "technology"
        assert issue.priority == "high"
        assert issue.assigned_department == "IT"
        assert issue.status == "pending"
        assert issue.reported_by_id == student.id
        assert issue.resolved_at is None

    def test_to_dict_resolves_reporter(self, service, student):
        data = service.create(student, make_issue_create()).to_dict()

        assert data["reportedBy"]["id"] == student.id
        assert data["reportedBy"]["email"].endswith("@campus.edu")
        assert "name" in data["reportedBy"]
        assert data["location"] == {"building": "CSE", "room": "101", "floor": None}
        assert data["comments"] == []
        assert data["resolutionDetails"] is None

    @pytest.mark.parametrize(
        "overrides",
        [
            {"title": ""},
            {"description": ""},
            {"building": ""},
            {"title": "   "},
        ],
    )
    def test_required_fields(self, service, student, overrides):
        with pytest.raises(ValidationError):
            service.create(student, make_issue_create(**overrides))

    def test_missing_location(self, service, student):
        with pytest.raises(ValidationError):
            service.create(student, IssueCreate(title="Chair", description="broken"))

    def test_audit_entry_written(self, service, db_session, student):
        issue = service.create(student, make_issue_create())
        entries = AuditService(db_session).query_by_entity("Issue", issue.id)

        assert [e.action for e in entries] == ["created"]
        assert entries[0].actor_id == student.id
        assert entries[0].actor_role == "student"


class TestGet:
    def test_not_found(self, service, admin):
        with pytest.raises(NotFoundError):
            service.get(admin, "missing")

    def test_student_reads_own(self, service, student):
        issue = service.create(student, make_issue_create())
        assert service.get(student, issue.id).id == issue.id

    def test_student_cannot_read_others(self, service, student, other_student):
        issue = service.create(student, make_issue_create())
        with pytest.raises(ForbiddenError):
            service.get(other_student, issue.id)

    def test_staff_department_rule(self, service, student, it_staff, maintenance_staff):
        issue = service.create(student, make_issue_create())
        assert service.get(it_staff, issue.id).id == issue.id
        with pytest.raises(ForbiddenError):
            service.get(maintenance_staff, issue.id)


class TestUpdate:
    def test_not_found(self, service, admin):
        with pytest.raises(NotFoundError):
            service.update(admin, "missing", IssueUpdate(status=IssueStatus.CLOSED))

    def test_staff_outside_department_forbidden(self, service, student, maintenance_staff):
        issue = service.create(student, make_issue_create())
        with pytest.raises(ForbiddenError):
            service.update(
                maintenance_staff, issue.id, IssueUpdate(status=IssueStatus.IN_PROGRESS)
            )

    def test_student_priority_ignored_status_applied(self, service, student):
        issue = service.create(student, make_issue_create())
        original_priority = issue.priority

        updated = service.update(
            student,
            issue.id,
            IssueUpdate(
                status=IssueStatus.CLOSED,
                priority=Priority.CRITICAL,
                assigned_department=Department.ADMIN,
            ),
        )

        assert updated.priority == original_priority
        assert updated.assigned_department == "IT"
        assert updated.status == "closed"

    def test_staff_changes_priority_and_department(self, service, student, it_staff):
        issue = service.create(student, make_issue_create())
        updated = service.update(
            it_staff,
            issue.id,
            IssueUpdate(priority=Priority.LOW, assigned_department=Department.ADMIN),
        )
        assert updated.priority == "low"
        assert updated.assigned_department == "admin"

    def test_any_transition_allowed(self, service, student, admin):
        issue = service.create(student, make_issue_create())
        service.update(admin, issue.id, IssueUpdate(status=IssueStatus.CLOSED))
        reopened = service.update(admin, issue.id, IssueUpdate(status=IssueStatus.PENDING))
        assert reopened.status == "pending"

    def test_resolution_recorded(self, service, student, it_staff):
        issue = service.create(student, make_issue_create())
        resolved = service.update(
            it_staff,
            issue.id,
            IssueUpdate(status=IssueStatus.RESOLVED, resolution_notes="Replaced bulb"),
        )

        details = resolved.to_dict()["resolutionDetails"]
        assert resolved.status == "resolved"
        assert resolved.resolved_by_id == it_staff.id
        assert details["resolvedBy"]["id"] == it_staff.id
        assert details["resolutionNotes"] == "Replaced bulb"
        assert details["resolvedAt"] is not None

    def test_default_resolution_notes(self, service, student, admin):
        issue = service.create(student, make_issue_create())
        resolved = service.update(admin, issue.id, IssueUpdate(status=IssueStatus.RESOLVED))
        assert resolved.resolution_notes == DEFAULT_RESOLUTION_NOTES

    def test_first_resolution_wins(self, service, student, it_staff, admin):
        issue = service.create(student, make_issue_create())

        first = service.update(
            it_staff,
            issue.id,
            IssueUpdate(status=IssueStatus.RESOLVED, resolution_notes="fixed"),
        )
        first_resolved_at = first.resolved_at

        time.sleep(0.01)
        second = service.update(
            admin,
            issue.id,
            IssueUpdate(status=IssueStatus.RESOLVED, resolution_notes="fixed again"),
        )

        assert second.resolved_at == first_resolved_at
        assert second.resolved_by_id == it_staff.id
        assert second.resolution_notes == "fixed"

    def test_concurrent_resolution_keeps_first(
        self, session_factory, service, student, it_staff, admin
    ):
        issue_id = service.create(student, make_issue_create()).id
        session_a, session_b = session_factory(), session_factory()
        try:
            service_a, service_b = IssueService(session_a), IssueService(session_b)

            # Both requests read the issue before either writes
            assert service_a.get(it_staff, issue_id).resolved_at is None
            assert service_b.get(admin, issue_id).resolved_at is None

            first = service_a.update(
                it_staff,
                issue_id,
                IssueUpdate(status=IssueStatus.RESOLVED, resolution_notes="first"),
            )
            second = service_b.update(
                admin,
                issue_id,
                IssueUpdate(status=IssueStatus.RESOLVED, resolution_notes="second"),
            )

            assert second.resolved_by_id == it_staff.id
            assert second.resolution_notes == "first"
            assert second.resolved_at == first.resolved_at
        finally:
            session_a.close()
            session_b.close()

    def test_resolution_survives_reopen(self, service, student, admin):
        issue = service.create(student, make_issue_create())
        service.update(admin, issue.id, IssueUpdate(status=IssueStatus.RESOLVED))
        first_resolved_at = service.get(admin, issue.id).resolved_at

        service.update(admin, issue.id, IssueUpdate(status=IssueStatus.IN_PROGRESS))
        again = service.update(admin, issue.id, IssueUpdate(status=IssueStatus.RESOLVED))

        assert again.resolved_at == first_resolved_at

    def test_audit_trail(self, service, db_session, student, admin):
        issue = service.create(student, make_issue_create())
        service.update(admin, issue.id, IssueUpdate(status=IssueStatus.IN_PROGRESS))

        actions = {e.action for e in AuditService(db_session).query_by_entity("Issue", issue.id)}
        assert actions == {"created", "updated", "status_changed"}


class TestComments:
    def test_append_trimmed(self, service, student):
        issue = service.create(student, make_issue_create())
        updated = service.add_comment(student, issue.id, "  still broken  ")

        comments = updated.to_dict()["comments"]
        assert len(comments) == 1
        assert comments[0]["text"] == "still broken"
        assert comments[0]["user"]["id"] == student.id

    def test_comments_keep_order(self, service, student, admin):
        issue = service.create(student, make_issue_create())
        service.add_comment(student, issue.id, "first")
        time.sleep(0.01)
        updated = service.add_comment(admin, issue.id, "second")

        assert [c["text"] for c in updated.to_dict()["comments"]] == ["first", "second"]

    @pytest.mark.parametrize("text", ["", "   ", None])
    def test_empty_text(self, service, student, text):
        issue = service.create(student, make_issue_create())
        with pytest.raises(ValidationError):
            service.add_comment(student, issue.id, text)

    def test_empty_text_checked_before_lookup(self, service, student):
        with pytest.raises(ValidationError):
            service.add_comment(student, "missing", " ")

    def test_not_found(self, service, student):
        with pytest.raises(NotFoundError):
            service.add_comment(student, "missing", "hello")

    def test_student_cannot_comment_on_others(self, service, student, other_student):
        issue = service.create(student, make_issue_create())
        with pytest.raises(ForbiddenError):
            service.add_comment(other_student, issue.id, "me too")

    def test_staff_outside_department(self, service, student, maintenance_staff):
        issue = service.create(student, make_issue_create())
        with pytest.raises(ForbiddenError):
            service.add_comment(maintenance_staff, issue.id, "not ours")


class TestList:
    def _create_mixed(self, service, student):
        service.create(student, make_issue_create())  # technology / IT
        service.create(
            student,
            make_issue_create(title="Wobbly desk", description="desk in lab moves", building="MBA"),
        )  # furniture / maintenance
        service.create(
            student,
            make_issue_create(title="Toilet blocked", description="restroom floor 2", building="EEE"),
        )  # facilities / facilities

    def test_pagination(self, service, student, admin):
        for i in range(25):
            service.create(student, make_issue_create(title=f"Chair {i}", description="wobbly"))

        issues, pagination = service.list(admin, page=3, limit=10)
        assert pagination.total == 25
        assert pagination.pages == 3
        assert pagination.current == 3
        assert len(issues) == 5

    def test_empty_result(self, service, admin):
        issues, pagination = service.list(admin)
        assert issues == []
        assert pagination.total == 0
        assert pagination.pages == 0

    def test_invalid_page(self, service, admin):
        with pytest.raises(ValidationError):
            service.list(admin, page=0)

    def test_staff_sees_only_department(self, service, student, it_staff):
        self._create_mixed(service, student)

        issues, pagination = service.list(it_staff)
        assert pagination.total == 1
        assert all(i.assigned_department == "IT" for i in issues)

    def test_staff_cannot_widen_scope_with_filter(self, service, student, it_staff):
        self._create_mixed(service, student)

        issues, _ = service.list(
            it_staff, IssueFilters(department="maintenance")
        )
        assert issues == []

    def test_student_list_is_unscoped(self, service, student, other_student):
        self._create_mixed(service, student)
        _, pagination = service.list(other_student)
        assert pagination.total == 3

    def test_filters(self, service, student, admin):
        self._create_mixed(service, student)

        issues, _ = service.list(admin, IssueFilters(category="furniture"))
        assert [i.title for i in issues] == ["Wobbly desk"]

        issues, _ = service.list(admin, IssueFilters(priority="medium"))
        assert [i.title for i in issues] == ["Toilet blocked"]

        issues, _ = service.list(admin, IssueFilters(status="all", department="all"))
        assert len(issues) == 3

    def test_search_is_case_insensitive_over_three_fields(self, service, student, admin):
        self._create_mixed(service, student)

        by_title, _ = service.list(admin, IssueFilters(search="WOBBLY"))
        by_description, _ = service.list(admin, IssueFilters(search="restroom"))
        by_building, _ = service.list(admin, IssueFilters(search="mba"))

        assert [i.title for i in by_title] == ["Wobbly desk"]
        assert [i.title for i in by_description] == ["Toilet blocked"]
        assert [i.title for i in by_building] == ["Wobbly desk"]

    def test_search_treats_wildcards_literally(self, service, student, admin):
        self._create_mixed(service, student)
        issues, _ = service.list(admin, IssueFilters(search="%"))
        assert issues == []

    def test_newest_first(self, service, student, admin):
        first = service.create(student, make_issue_create(title="Old chair"))
        time.sleep(0.01)
        second = service.create(student, make_issue_create(title="New chair"))

        issues, _ = service.list(admin)
        assert [i.id for i in issues] == [second.id, first.id]

    def test_same_timestamp_sorted_by_priority(self, service, db_session, student, admin):
        low = service.create(student, make_issue_create(title="Wobbly desk", description="moves"))
        critical = service.create(student, make_issue_create(title="Fire in lab", description="smoke"))
        medium = service.create(
            student, make_issue_create(title="Toilet blocked", description="restroom")
        )
        assert [low.priority, critical.priority, medium.priority] == [
            Priority.LOW,
            Priority.CRITICAL,
            Priority.MEDIUM,
        ]

        stamp = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)
        for issue in (low, critical, medium):
            issue.created_at = stamp
        db_session.commit()

        issues, _ = service.list(admin)
        assert [i.priority for i in issues] == ["critical", "medium", "low"]

    def test_my_issues(self, service, student, other_student):
        mine = service.create(student, make_issue_create())
        service.create(other_student, make_issue_create())

        assert [i.id for i in service.list_for_reporter(student)] == [mine.id]


class TestStats:
    def test_counts(self, service, student, admin):
        a = service.create(student, make_issue_create())
        b = service.create(student, make_issue_create(title="Wobbly desk", description="moves"))
        service.create(student, make_issue_create(title="Toilet", description="restroom"))
        service.update(admin, a.id, IssueUpdate(status=IssueStatus.RESOLVED))
        service.update(admin, b.id, IssueUpdate(status=IssueStatus.IN_PROGRESS))

        stats = service.stats(admin)
        assert stats.total_issues == 3
        assert stats.pending_issues == 1
        assert stats.in_progress_issues == 1
        assert stats.resolved_issues == 1

    def test_staff_scoped(self, service, student, it_staff):
        service.create(student, make_issue_create())
        service.create(student, make_issue_create(title="Wobbly desk", description="moves"))

        stats = service.stats(it_staff)
        assert stats.total_issues == 1
        assert stats.department_stats == []

    def test_department_breakdown_admin_only(self, service, student, admin):
        a = service.create(student, make_issue_create())
        service.create(student, make_issue_create(title="Laptop", description="screen cracked"))
        service.create(student, make_issue_create(title="Wobbly desk", description="moves"))
        service.update(admin, a.id, IssueUpdate(status=IssueStatus.RESOLVED))

        rows = {row.department: row for row in service.stats(admin).department_stats}
        assert rows[Department.IT].total == 2
        assert rows[Department.IT].resolved == 1
        assert rows[Department.IT].pending == 1
        assert rows[Department.MAINTENANCE].total == 1

        assert service.stats(student).department_stats == []

    def test_stats_serialization(self, service, admin):
        data = service.stats(admin).model_dump(by_alias=True)
        assert set(data) == {
            "totalIssues",
            "pendingIssues",
            "inProgressIssues",
            "resolvedIssues",
            "departmentStats",
        }
