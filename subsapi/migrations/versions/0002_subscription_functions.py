from __future__ import annotations

from alembic import op

# Alembic identifiers
revision = "0002_subscription_functions"
down_revision = "0001_initial"
branch_labels = None
depends_on = None

# SQL-side helpers for reporting and ad-hoc queries; PostgreSQL only.
FUNCTIONS = [
    """
    CREATE OR REPLACE FUNCTION calculate_remaining_days(p_subscription_id INTEGER)
    RETURNS INTEGER
    AS $$
        SELECT (s.end_date::date - CURRENT_DATE)::INTEGER
        FROM subscriptions s
        WHERE s.id = p_subscription_id;
    $$
    LANGUAGE sql STABLE;
    """,
    """
    CREATE OR REPLACE FUNCTION get_subscriptions_by_user(p_user_id INTEGER)
    RETURNS SETOF subscriptions
    AS $$
        SELECT * FROM subscriptions s WHERE s.user_id = p_user_id ORDER BY s.id;
    $$
    LANGUAGE sql STABLE;
    """,
    """
    CREATE OR REPLACE FUNCTION get_active_subscriptions()
    RETURNS SETOF subscriptions
    AS $$
        SELECT * FROM subscriptions s
        WHERE s.start_date::date <= CURRENT_DATE
          AND s.end_date::date >= CURRENT_DATE
        ORDER BY s.id;
    $$
    LANGUAGE sql STABLE;
    """,
]


def upgrade():
    if op.get_bind().dialect.name != "postgresql":
        return
    for ddl in FUNCTIONS:
        op.execute(ddl)


def downgrade():
    if op.get_bind().dialect.name != "postgresql":
        return
    op.execute("DROP FUNCTION IF EXISTS get_active_subscriptions()")
    op.execute("DROP FUNCTION IF EXISTS get_subscriptions_by_user(INTEGER)")
    op.execute("DROP FUNCTION IF EXISTS calculate_remaining_days(INTEGER)")
