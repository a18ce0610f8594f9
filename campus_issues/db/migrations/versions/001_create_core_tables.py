"""create users, issues, issue_comments and audit_log

Revision ID: 001
Revises:
Create Date: 2026-10-19 00:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "001"
down_revision = None
branch_labels = None
depends_on = None

DEPARTMENTS = ("IT", "maintenance", "admin", "facilities", "academic")


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=128), primary_key=True),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("email", sa.String(length=254), nullable=False),
        sa.Column(
            "role",
            sa.Enum("student", "staff", "admin", name="user_role"),
            nullable=False,
        ),
        sa.Column("department", sa.Enum(*DEPARTMENTS, name="department"), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "issues",
        sa.Column("id", sa.String(length=128), primary_key=True),
        sa.Column("title", sa.String(length=100), nullable=False),
        sa.Column("description", sa.String(length=500), nullable=False),
        sa.Column(
            "category",
            sa.Enum(
                "technology",
                "furniture",
                "utilities",
                "facilities",
                "academic",
                "other",
                name="issue_category",
            ),
            nullable=False,
        ),
        sa.Column(
            "priority",
            sa.Enum("low", "medium", "high", "critical", name="issue_priority"),
            nullable=False,
        ),
        sa.Column(
            "status",
            sa.Enum(
                "pending",
                "assigned",
                "in-progress",
                "resolved",
                "closed",
                name="issue_status",
            ),
            nullable=False,
        ),
        sa.Column("location_building", sa.String(length=120), nullable=False),
        sa.Column("location_room", sa.String(length=60), nullable=True),
        sa.Column("location_floor", sa.String(length=30), nullable=True),
        sa.Column(
            "reported_by_id",
            sa.String(length=128),
            sa.ForeignKey("users.id"),
            nullable=False,
        ),
        sa.Column(
            "assigned_department",
            sa.Enum(*DEPARTMENTS, name="department", create_type=False),
            nullable=True,
        ),
        sa.Column(
            "resolved_by_id",
            sa.String(length=128),
            sa.ForeignKey("users.id"),
            nullable=True,
        ),
        sa.Column("resolved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("resolution_notes", sa.String(length=500), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_index("ix_issues_category", "issues", ["category"])
    op.create_index("ix_issues_status_priority", "issues", ["status", "priority"])
    op.create_index("ix_issues_assigned_department", "issues", ["assigned_department"])
    op.create_index("ix_issues_reported_by", "issues", ["reported_by_id"])
    op.create_index("ix_issues_created_at", "issues", ["created_at"])

    op.create_table(
        "issue_comments",
        sa.Column("id", sa.String(length=128), primary_key=True),
        sa.Column(
            "issue_id",
            sa.String(length=128),
            sa.ForeignKey("issues.id"),
            nullable=False,
        ),
        sa.Column(
            "user_id",
            sa.String(length=128),
            sa.ForeignKey("users.id"),
            nullable=False,
        ),
        sa.Column("text", sa.Text, nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_index("ix_issue_comments_issue_id", "issue_comments", ["issue_id"])

    op.create_table(
        "audit_log",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column(
            "ts",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "actor_role",
            sa.Enum("student", "staff", "admin", "system", name="audit_actor_role"),
            nullable=False,
        ),
        sa.Column("actor_id", sa.String(length=128), nullable=False),
        sa.Column(
            "action",
            sa.Enum(
                "created",
                "updated",
                "status_changed",
                "commented",
                name="audit_action",
            ),
            nullable=False,
        ),
        sa.Column("entity_kind", sa.String(length=50), nullable=False),
        sa.Column("entity_id", sa.String(length=128), nullable=False),
        sa.Column("before", sa.JSON, nullable=True),
        sa.Column("after", sa.JSON, nullable=True),
        sa.Column("note", sa.Text, nullable=True),
    )
    op.create_index("ix_audit_log_ts", "audit_log", ["ts"])
    op.create_index("ix_audit_log_actor_id", "audit_log", ["actor_id"])
    op.create_index("ix_audit_log_action", "audit_log", ["action"])
    op.create_index("ix_audit_log_entity_kind", "audit_log", ["entity_kind"])
    op.create_index("ix_audit_log_entity_id", "audit_log", ["entity_id"])
    op.create_index("ix_audit_log_entity", "audit_log", ["entity_kind", "entity_id"])
    op.create_index(
        "ix_audit_log_entity_ts", "audit_log", ["entity_kind", "entity_id", "ts"]
    )


def downgrade() -> None:
    op.drop_table("audit_log")
    op.drop_table("issue_comments")
    op.drop_table("issues")
    op.drop_table("users")
    sa.Enum(name="audit_action").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="audit_actor_role").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="issue_status").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="issue_priority").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="issue_category").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="department").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="user_role").drop(op.get_bind(), checkfirst=True)
