"""001 – Initial schema: holiday calendars, holidays, leave applications.

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19 10:00:00.000000+05:30
"""

from alembic import op

# Revision identifiers
revision = "001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

ENUM_TYPES: list[tuple[str, list[str]]] = [
    ("leave_status", ["pending", "approved", "rejected", "cancelled", "withdrawn"]),
    ("half_day_period", ["first_half", "second_half"]),
    (
        "sandwich_reason_code",
        [
            "FRI_SAT_SUN",
            "SAT_SUN_MON",
            "FRI_TO_MON",
            "SPLIT_FRI_MON",
            "SINGLE_ADVANCE",
            "SINGLE_SUDDEN",
            "NONE",
        ],
    ),
]


def _create_enum(name: str, values: list[str]) -> None:
    vals = ", ".join(f"'{v}'" for v in values)
    op.execute(f"CREATE TYPE {name} AS ENUM ({vals})")


def _drop_enum(name: str) -> None:
    op.execute(f"DROP TYPE IF EXISTS {name}")


# ---------------------------------------------------------------------------
# UPGRADE
# ---------------------------------------------------------------------------


def upgrade() -> None:
    # ── Extensions ────────────────────────────────────────────────────────
    op.execute('CREATE EXTENSION IF NOT EXISTS "uuid-ossp"')

    # ── Enum types ────────────────────────────────────────────────────────
    for name, values in ENUM_TYPES:
        _create_enum(name, values)

    # ── Holiday calendars ─────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE holiday_calendars (
            id              UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            name            VARCHAR(100) NOT NULL,
            year            INTEGER NOT NULL,
            location_id     UUID,
            is_active       BOOLEAN DEFAULT TRUE,
            created_at      TIMESTAMPTZ DEFAULT NOW(),
            CONSTRAINT uq_holiday_cal_name_year_loc UNIQUE (name, year, location_id)
        )
    """)

    op.execute("""
        CREATE TABLE holidays (
            id              UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            calendar_id     UUID NOT NULL REFERENCES holiday_calendars(id) ON DELETE CASCADE,
            name            VARCHAR(150) NOT NULL,
            date            DATE NOT NULL,
            is_optional     BOOLEAN DEFAULT FALSE,
            created_at      TIMESTAMPTZ DEFAULT NOW(),
            CONSTRAINT uq_holiday_cal_date UNIQUE (calendar_id, date)
        )
    """)
    op.execute("CREATE INDEX idx_holidays_date ON holidays(date)")

    # ── Leave applications ────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE leave_applications (
            id                    UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            employee_id           UUID NOT NULL,
            start_date            DATE NOT NULL,
            end_date              DATE NOT NULL,
            is_half_day           BOOLEAN DEFAULT FALSE,
            half_day_period       half_day_period,
            reason                TEXT,
            status                leave_status NOT NULL DEFAULT 'pending',
            applied_at            TIMESTAMPTZ DEFAULT NOW(),
            deducted_days         NUMERIC(5,1),
            base_working_days     INTEGER,
            is_sandwich_leave     BOOLEAN,
            sandwich_reason_code  sandwich_reason_code,
            created_at            TIMESTAMPTZ DEFAULT NOW(),
            updated_at            TIMESTAMPTZ DEFAULT NOW(),
            CONSTRAINT ck_leave_app_range CHECK (start_date <= end_date)
        )
    """)
    op.execute(
        "CREATE INDEX ix_leave_app_employee_dates "
        "ON leave_applications(employee_id, start_date, end_date)"
    )
    op.execute(
        "CREATE INDEX idx_leave_app_status ON leave_applications(employee_id, status)"
    )


# ---------------------------------------------------------------------------
# DOWNGRADE
# ---------------------------------------------------------------------------


def downgrade() -> None:
    for t in ["leave_applications", "holidays", "holiday_calendars"]:
        op.execute(f"DROP TABLE IF EXISTS {t} CASCADE")

    # Drop enum types
    for name, _ in reversed(ENUM_TYPES):
        _drop_enum(name)

    op.execute('DROP EXTENSION IF EXISTS "uuid-ossp"')
