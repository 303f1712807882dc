"""Initial schema: organizations, memberships, tasks, people, team resources, RLS.

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-17 09:00:00.000000
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "0001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# Tenant tables: every row visible only to members of its org_id.
RLS_TABLES = [
    "tasks",
    "event_people",
    "team_resources",
]

# storage_orphans is internal bookkeeping read by the cleanup job, which runs
# without a user; it is never exposed to API callers.


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    ]


def _uuid(name: str, **kwargs) -> sa.Column:
    return sa.Column(name, postgresql.UUID(as_uuid=True), **kwargs)


# ---------------------------------------------------------------------------
# UPGRADE
# ---------------------------------------------------------------------------


def upgrade() -> None:
    # -----------------------------------------------------------------------
    # 1. Reference tables
    # -----------------------------------------------------------------------

    op.create_table(
        "organizations",
        _uuid("id", primary_key=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("slug", sa.Text(), nullable=True, unique=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    )

    # profiles mirror auth.users (populated by the auth provider's trigger)
    op.create_table(
        "profiles",
        _uuid("id", primary_key=True),
        sa.Column("email", sa.Text(), nullable=True),
        sa.Column("full_name", sa.Text(), nullable=True),
    )
    op.create_index("idx_profiles_email", "profiles", ["email"])

    op.create_table(
        "org_members",
        _uuid("user_id", sa.ForeignKey("profiles.id", ondelete="CASCADE"), primary_key=True),
        _uuid("org_id", sa.ForeignKey("organizations.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("role", sa.Text(), nullable=False, server_default="member"),
        sa.Column("team", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint(
            "team IS NULL OR team IN ('tech', 'logistics', 'sponsorship', 'outreach')",
            name="org_members_team_check",
        ),
    )
    op.create_index("idx_org_members_org_id", "org_members", ["org_id"])

    # -----------------------------------------------------------------------
    # 2. Tenant tables
    # -----------------------------------------------------------------------

    op.create_table(
        "tasks",
        _uuid("id", primary_key=True),
        _uuid("org_id", sa.ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("status", sa.Text(), nullable=False, server_default="todo"),
        sa.Column("priority", sa.Text(), nullable=True),
        sa.Column("due_date", sa.DateTime(timezone=True), nullable=True),
        _uuid("created_by", sa.ForeignKey("profiles.id"), nullable=False),
        _uuid("assigned_to", sa.ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True),
        sa.Column("team", sa.Text(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("char_length(title) BETWEEN 1 AND 500", name="tasks_title_length"),
        sa.CheckConstraint(
            "description IS NULL OR char_length(description) <= 5000", name="tasks_description_length"
        ),
        sa.CheckConstraint("status IN ('todo', 'doing', 'done')", name="tasks_status_check"),
        sa.CheckConstraint(
            "priority IS NULL OR priority IN ('low', 'medium', 'high')", name="tasks_priority_check"
        ),
        sa.CheckConstraint(
            "team IS NULL OR team IN ('tech', 'logistics', 'sponsorship', 'outreach')",
            name="tasks_team_check",
        ),
    )
    op.create_index("idx_tasks_org_created", "tasks", ["org_id", sa.text("created_at DESC")])
    op.create_index("idx_tasks_org_team", "tasks", ["org_id", "team"])
    op.create_index("idx_tasks_assigned_to", "tasks", ["assigned_to"])

    op.create_table(
        "event_people",
        _uuid("id", primary_key=True),
        _uuid("org_id", sa.ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False),
        sa.Column("person_type", sa.Text(), nullable=False),
        sa.Column("full_name", sa.Text(), nullable=False),
        sa.Column("email", sa.Text(), nullable=True),
        sa.Column("phone", sa.Text(), nullable=True),
        sa.Column("company", sa.Text(), nullable=True),
        sa.Column("role_title", sa.Text(), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("skills", postgresql.ARRAY(sa.Text()), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        _uuid("created_by", sa.ForeignKey("profiles.id"), nullable=False),
        *_timestamps(),
        sa.CheckConstraint(
            "person_type IN ('volunteer', 'mentor', 'judge', 'sponsor', 'partner')",
            name="event_people_type_check",
        ),
    )
    op.create_index("idx_event_people_org_type", "event_people", ["org_id", "person_type"])

    op.create_table(
        "team_resources",
        _uuid("id", primary_key=True),
        _uuid("org_id", sa.ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False),
        sa.Column("team", sa.Text(), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("resource_type", sa.Text(), nullable=False),
        sa.Column("url", sa.Text(), nullable=False),
        sa.Column("storage_path", sa.Text(), nullable=True),
        sa.Column("file_name", sa.Text(), nullable=True),
        sa.Column("file_size", sa.BigInteger(), nullable=True),
        sa.Column("file_type", sa.Text(), nullable=True),
        _uuid("created_by", sa.ForeignKey("profiles.id"), nullable=False),
        *_timestamps(),
        sa.CheckConstraint(
            "team IN ('tech', 'logistics', 'sponsorship', 'outreach')", name="team_resources_team_check"
        ),
        sa.CheckConstraint(
            "resource_type IN ('document', 'link', 'guide', 'other')", name="team_resources_type_check"
        ),
    )
    op.create_index("idx_team_resources_org_team", "team_resources", ["org_id", "team"])

    op.create_table(
        "storage_orphans",
        _uuid("id", primary_key=True),
        _uuid("org_id", sa.ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False),
        sa.Column("storage_path", sa.Text(), nullable=False),
        sa.Column("reason", sa.Text(), nullable=False),
        sa.Column("last_error", sa.Text(), nullable=True),
        sa.Column("attempts", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    )
    op.create_index("idx_storage_orphans_org_id", "storage_orphans", ["org_id"])

    # -----------------------------------------------------------------------
    # 3. Membership lookup used by policies
    #
    # SECURITY DEFINER so that the org_members policy can call it without
    # re-entering its own policy.
    # -----------------------------------------------------------------------

    op.execute("""
        CREATE OR REPLACE FUNCTION hp_user_org_ids(p_user_id uuid)
        RETURNS SETOF uuid
        LANGUAGE sql STABLE SECURITY DEFINER
        SET search_path = public
        AS $$
            SELECT org_id FROM org_members WHERE user_id = p_user_id
        $$
    """)

    op.execute("""
        CREATE OR REPLACE FUNCTION hp_current_user_id()
        RETURNS uuid
        LANGUAGE sql STABLE
        AS $$
            SELECT nullif(current_setting('app.current_user_id', true), '')::uuid
        $$
    """)

    # -----------------------------------------------------------------------
    # 4. Row Level Security (RLS) policies
    # -----------------------------------------------------------------------

    op.execute("ALTER TABLE org_members ENABLE ROW LEVEL SECURITY")
    op.execute("""
        CREATE POLICY org_members_visible ON org_members
        FOR SELECT
        USING (org_id IN (SELECT hp_user_org_ids(hp_current_user_id())))
    """)
    op.execute("ALTER TABLE org_members FORCE ROW LEVEL SECURITY")

    for table in RLS_TABLES:
        op.execute(f"ALTER TABLE {table} ENABLE ROW LEVEL SECURITY")
        op.execute(f"""
            CREATE POLICY org_isolation ON {table}
            USING (org_id IN (SELECT hp_user_org_ids(hp_current_user_id())))
            WITH CHECK (org_id IN (SELECT hp_user_org_ids(hp_current_user_id())))
        """)
        op.execute(f"ALTER TABLE {table} FORCE ROW LEVEL SECURITY")


# ---------------------------------------------------------------------------
# DOWNGRADE
# ---------------------------------------------------------------------------


def downgrade() -> None:
    for table in reversed(RLS_TABLES):
        op.execute(f"DROP POLICY IF EXISTS org_isolation ON {table}")
        op.execute(f"ALTER TABLE {table} DISABLE ROW LEVEL SECURITY")
    op.execute("DROP POLICY IF EXISTS org_members_visible ON org_members")
    op.execute("ALTER TABLE org_members DISABLE ROW LEVEL SECURITY")

    op.execute("DROP FUNCTION IF EXISTS hp_current_user_id()")
    op.execute("DROP FUNCTION IF EXISTS hp_user_org_ids(uuid)")

    op.drop_table("storage_orphans")
    op.drop_table("team_resources")
    op.drop_table("event_people")
    op.drop_table("tasks")
    op.drop_table("org_members")
    op.drop_table("profiles")
    op.drop_table("organizations")
