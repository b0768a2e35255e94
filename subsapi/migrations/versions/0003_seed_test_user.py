from __future__ import annotations

import os

from alembic import op
import sqlalchemy as sa

from subsapi.services.auth_service import AuthProvider

# Alembic identifiers
revision = "0003_seed_test_user"
down_revision = "0002_subscription_functions"
branch_labels = None
depends_on = None

SEED_USERNAME = "test_user"


def upgrade():
    users = sa.table(
        "users",
        sa.column("username", sa.String),
        sa.column("password_hash", sa.String),
        sa.column("email", sa.String),
    )
    password = os.getenv("SEED_USER_PASSWORD", "test_password")
    op.bulk_insert(users, [{
        "username": SEED_USERNAME,
        "password_hash": AuthProvider.hash_password(password),
        "email": "test_user@test.com",
    }])


def downgrade():
    op.execute(sa.text("DELETE FROM users WHERE username = :u").bindparams(u=SEED_USERNAME))
