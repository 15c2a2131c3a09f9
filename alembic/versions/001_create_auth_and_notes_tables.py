"""Create users, otps and notes tables

Revision ID: 001
Revises: None
Create Date: 2026-10-17 00:00:00.000000+00:00

What:  Initial schema: accounts, one-time passcodes and per-user notes.
How:   Portable column types (integer keys, timestamps with time zone).

Rollback: downgrade() drops all three tables (destructive, all data lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """
    Create the three tables with constraints and indexes.

    Column rationale is documented on the models in notesapp/models/.
    """
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column(
            "email",
            sa.String(255),
            nullable=False,
            comment="Lower-cased, trimmed address; identifies at most one user",
        ),
        sa.Column("dob", sa.Date(), nullable=True),
        sa.Column("password_hash", sa.String(255), nullable=True),
        sa.Column(
            "google_id",
            sa.String(255),
            nullable=True,
            comment="Google subject identifier once the account is linked",
        ),
        sa.Column("is_google_user", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    # Unique: backstop for concurrent signups with the same email
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "otps",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("otp_code", sa.String(6), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("is_used", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    # Unique: at most one passcode per email, even under concurrent issues
    op.create_index("idx_otps_email", "otps", ["email"], unique=True)
    op.create_index("idx_otps_expires_at", "otps", ["expires_at"])

    op.create_table(
        "notes",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
            comment="When this note was created (UTC)",
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
            comment="Last modification (UTC)",
        ),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    # Serves "this user's notes, newest first"
    op.create_index(
        "idx_notes_user_created",
        "notes",
        ["user_id", sa.text("created_at DESC")],
    )


def downgrade() -> None:
    """
    Drop all tables.

    WARNING: destructive. In production prefer a forward migration.
    """
    op.drop_index("idx_notes_user_created", table_name="notes")
    op.drop_table("notes")
    op.drop_index("idx_otps_expires_at", table_name="otps")
    op.drop_index("idx_otps_email", table_name="otps")
    op.drop_table("otps")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
