"""Initial schema: clients, tokens, onboarding, documents, audit log.

Revision ID: 0001
Revises: (none)
Create Date: 2026-10-19

Run with:
    alembic upgrade head
    python -m onboard.cli seed-steps
"""

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

from alembic import op
import sqlalchemy as sa

ROLE = sa.Enum("USER", "ADMIN", name="role")
ONBOARDING_STATUS = sa.Enum("PENDING", "IN_PROGRESS", "COMPLETED", name="onboardingstatus")
STEP_STATUS = sa.Enum("PENDING", "IN_PROGRESS", "COMPLETED", "SKIPPED", name="stepstatus")
DOCUMENT_CATEGORY = sa.Enum(
    "ID_DOCUMENT", "BUSINESS_LICENSE", "TAX_DOCUMENT", "PROOF_OF_ADDRESS", "OTHER",
    name="documentcategory",
)
VERIFICATION_STATUS = sa.Enum("PENDING", "APPROVED", "REJECTED", name="verificationstatus")


def _client_fk() -> sa.Column:
    return sa.Column(
        "client_id",
        sa.String(36),
        sa.ForeignKey("clients.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )


def upgrade() -> None:
    # ── Identity ─────────────────────────────────────────────

    op.create_table(
        "clients",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("first_name", sa.String(50), nullable=False),
        sa.Column("last_name", sa.String(50), nullable=False),
        sa.Column("company_name", sa.String(100)),
        sa.Column("phone", sa.String(20)),
        sa.Column("avatar_url", sa.String(1024)),
        sa.Column("email_verified", sa.Boolean(), server_default=sa.false()),
        sa.Column("role", ROLE, server_default="USER"),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index("ix_clients_email", "clients", ["email"], unique=True)

    # ── Tokens ───────────────────────────────────────────────

    op.create_table(
        "refresh_tokens",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("token", sa.Text(), nullable=False, unique=True),
        _client_fk(),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
    )
    for table in ("password_reset_tokens", "email_verification_tokens"):
        op.create_table(
            table,
            sa.Column("id", sa.String(36), primary_key=True),
            sa.Column("token", sa.String(128), nullable=False, unique=True),
            _client_fk(),
            sa.Column("expires_at", sa.DateTime(), nullable=False),
            sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        )

    # ── Onboarding ───────────────────────────────────────────

    op.create_table(
        "onboarding_steps",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("step_number", sa.Integer(), nullable=False, unique=True),
        sa.Column("name", sa.String(50), nullable=False, unique=True),
        sa.Column("title", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("is_required", sa.Boolean(), server_default=sa.true()),
    )

    op.create_table(
        "onboarding_progress",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "client_id",
            sa.String(36),
            sa.ForeignKey("clients.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column("current_step", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("status", ONBOARDING_STATUS, nullable=False, server_default="PENDING"),
        sa.Column("completed_at", sa.DateTime()),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
    )

    op.create_table(
        "step_progress",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "onboarding_progress_id",
            sa.String(36),
            sa.ForeignKey("onboarding_progress.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column(
            "onboarding_step_id",
            sa.String(36),
            sa.ForeignKey("onboarding_steps.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("status", STEP_STATUS, nullable=False, server_default="PENDING"),
        sa.Column("data", sa.JSON()),
        sa.Column("completed_at", sa.DateTime()),
        sa.UniqueConstraint(
            "onboarding_progress_id",
            "onboarding_step_id",
            name="uq_step_progress_progress_step",
        ),
    )

    # ── Documents ────────────────────────────────────────────

    op.create_table(
        "documents",
        sa.Column("id", sa.String(36), primary_key=True),
        _client_fk(),
        sa.Column("file_name", sa.String(255), nullable=False),
        sa.Column("file_url", sa.String(1024), nullable=False),
        sa.Column("file_key", sa.String(255), nullable=False),
        sa.Column("file_type", sa.String(100), nullable=False),
        sa.Column("file_size", sa.Integer(), nullable=False),
        sa.Column("category", DOCUMENT_CATEGORY, nullable=False),
        sa.Column("custom_doc_type", sa.String(100)),
        sa.Column(
            "verification_status",
            VERIFICATION_STATUS,
            nullable=False,
            server_default="PENDING",
            index=True,
        ),
        sa.Column("rejection_reason", sa.Text()),
        sa.Column("verified_at", sa.DateTime()),
        sa.Column("uploaded_at", sa.DateTime(), nullable=False, server_default=sa.func.now(), index=True),
    )

    # ── Audit ────────────────────────────────────────────────

    op.create_table(
        "admin_activity_logs",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "admin_id",
            sa.String(36),
            sa.ForeignKey("clients.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("action", sa.String(50), nullable=False),
        sa.Column("target_type", sa.String(50), nullable=False),
        sa.Column("target_id", sa.String(36), nullable=False),
        sa.Column("details", sa.JSON()),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now(), index=True),
    )


def downgrade() -> None:
    op.drop_table("admin_activity_logs")
    op.drop_table("documents")
    op.drop_table("step_progress")
    op.drop_table("onboarding_progress")
    op.drop_table("onboarding_steps")
    op.drop_table("email_verification_tokens")
    op.drop_table("password_reset_tokens")
    op.drop_table("refresh_tokens")
    op.drop_index("ix_clients_email", table_name="clients")
    op.drop_table("clients")

    bind = op.get_bind()
    for enum in (VERIFICATION_STATUS, DOCUMENT_CATEGORY, STEP_STATUS, ONBOARDING_STATUS, ROLE):
        enum.drop(bind, checkfirst=True)
