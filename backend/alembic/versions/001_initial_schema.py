"""Initial schema: users, events, ticket ledger, payment orders, bookings,
facilities, courts, time slots, court bookings, waitlists, reports and venue reviews.

Revision ID: 001
Revises: None
Create Date: 2026-10-17
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default=sa.text("'PLAYER'")),
        sa.Column("phone", sa.String(32), nullable=True),
        sa.Column("avatar_url", sa.String(500), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("is_banned", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        *_timestamps(),
        sa.CheckConstraint("role IN ('PLAYER', 'FACILITY_OWNER', 'ADMIN')", name="check_user_role"),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "events",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", sa.String(30), nullable=False, server_default=sa.text("'OTHER'")),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'DRAFT'")),
        sa.Column("city", sa.String(120), nullable=True),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("max_attendees", sa.Integer(), nullable=False),
        sa.Column("current_attendees", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("is_free", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("featured", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("trending", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("organizer_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("current_attendees >= 0", name="check_event_attendees_non_negative"),
        sa.CheckConstraint("max_attendees > 0", name="check_event_max_attendees_positive"),
        sa.CheckConstraint("end_date >= start_date", name="check_event_dates_ordered"),
        sa.CheckConstraint(
            "status IN ('DRAFT', 'PUBLISHED', 'CANCELLED', 'COMPLETED')", name="check_event_status"
        ),
        sa.CheckConstraint(
            "category IN ('MUSIC', 'SPORTS', 'TECHNOLOGY', 'BUSINESS', 'ARTS', 'FOOD', "
            "'EDUCATION', 'HEALTH', 'OTHER')",
            name="check_event_category",
        ),
    )
    op.create_index("ix_events_id", "events", ["id"])
    op.create_index("ix_events_organizer_id", "events", ["organizer_id"])
    # Default public listing: published events ordered by start date
    op.create_index("ix_events_status_start", "events", ["status", "start_date"])

    op.create_table(
        "tickets",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("event_id", sa.Integer(), sa.ForeignKey("events.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("ticket_type", sa.String(20), nullable=False, server_default=sa.text("'GENERAL'")),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False, server_default=sa.text("'INR'")),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("sold_quantity", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("available_quantity", sa.Integer(), nullable=False),
        sa.Column("max_per_user", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("min_per_user", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("sale_start_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("sale_end_date", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        # LEDGER INVARIANT: these make overselling impossible even if application code is wrong
        sa.CheckConstraint("available_quantity >= 0", name="check_ticket_available_non_negative"),
        sa.CheckConstraint("sold_quantity >= 0", name="check_ticket_sold_non_negative"),
        sa.CheckConstraint("available_quantity + sold_quantity = quantity", name="check_ticket_ledger_balanced"),
        sa.CheckConstraint("price >= 0", name="check_ticket_price_non_negative"),
        sa.CheckConstraint("min_per_user >= 1", name="check_ticket_min_per_user"),
        sa.CheckConstraint("max_per_user >= min_per_user", name="check_ticket_per_user_range"),
        sa.CheckConstraint(
            "ticket_type IN ('GENERAL', 'VIP', 'EARLY_BIRD', 'STUDENT', 'GROUP')", name="check_ticket_type"
        ),
    )
    op.create_index("ix_tickets_id", "tickets", ["id"])
    op.create_index("ix_tickets_event_id", "tickets", ["event_id"])

    op.create_table(
        "payment_orders",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("order_ref", sa.String(64), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("event_id", sa.Integer(), sa.ForeignKey("events.id"), nullable=False),
        sa.Column("ticket_id", sa.Integer(), sa.ForeignKey("tickets.id"), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("total_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False, server_default=sa.text("'INR'")),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'PENDING'")),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("quantity > 0", name="check_payment_order_quantity_positive"),
        sa.CheckConstraint("total_amount >= 0", name="check_payment_order_amount_non_negative"),
        sa.CheckConstraint(
            "status IN ('PENDING', 'SUCCESSFUL', 'FAILED', 'CANCELLED')", name="check_payment_order_status"
        ),
    )
    op.create_index("ix_payment_orders_id", "payment_orders", ["id"])
    op.create_index("ix_payment_orders_order_ref", "payment_orders", ["order_ref"], unique=True)
    op.create_index("ix_payment_orders_user_id", "payment_orders", ["user_id"])
    op.create_index("ix_payment_orders_ticket_id", "payment_orders", ["ticket_id"])
    # Expiration sweeper: WHERE status = 'PENDING' AND expires_at < now()
    op.create_index("ix_payment_orders_status_expires", "payment_orders", ["status", "expires_at"])

    op.create_table(
        "payments",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("payment_order_id", sa.Integer(), sa.ForeignKey("payment_orders.id"), nullable=False),
        sa.Column("external_payment_id", sa.String(128), nullable=True),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False, server_default=sa.text("'INR'")),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("is_verified", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("verified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("failure_reason", sa.String(500), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("status IN ('SUCCESSFUL', 'FAILED')", name="check_payment_status"),
    )
    op.create_index("ix_payments_id", "payments", ["id"])
    op.create_index("ix_payments_payment_order_id", "payments", ["payment_order_id"])

    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("payment_order_id", sa.Integer(), sa.ForeignKey("payment_orders.id"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("event_id", sa.Integer(), sa.ForeignKey("events.id"), nullable=False),
        sa.Column("ticket_id", sa.Integer(), sa.ForeignKey("tickets.id"), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("total_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False, server_default=sa.text("'INR'")),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'CONFIRMED'")),
        *_timestamps(),
        # One payment order can never produce two bookings
        sa.UniqueConstraint("payment_order_id", name="uq_bookings_payment_order"),
        sa.CheckConstraint("quantity > 0", name="check_booking_quantity_positive"),
        sa.CheckConstraint("status IN ('CONFIRMED', 'CANCELLED', 'COMPLETED')", name="check_booking_status"),
    )
    op.create_index("ix_bookings_id", "bookings", ["id"])
    op.create_index("ix_bookings_user_id", "bookings", ["user_id"])
    op.create_index("ix_bookings_event_id", "bookings", ["event_id"])
    op.create_index("ix_bookings_ticket_id", "bookings", ["ticket_id"])

    op.create_table(
        "facilities",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("owner_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("address", sa.String(500), nullable=False),
        sa.Column("venue_type", sa.String(20), nullable=False, server_default=sa.text("'INDOOR'")),
        sa.Column("phone", sa.String(32), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'PENDING'")),
        sa.Column("rejection_reason", sa.String(500), nullable=True),
        sa.Column("rating", sa.Numeric(3, 2), nullable=False, server_default=sa.text("0")),
        sa.Column("review_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        *_timestamps(),
        sa.CheckConstraint("status IN ('PENDING', 'APPROVED', 'REJECTED')", name="check_facility_status"),
        sa.CheckConstraint("venue_type IN ('INDOOR', 'OUTDOOR', 'MIXED')", name="check_facility_venue_type"),
    )
    op.create_index("ix_facilities_id", "facilities", ["id"])
    op.create_index("ix_facilities_owner_id", "facilities", ["owner_id"])

    op.create_table(
        "courts",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "facility_id", sa.Integer(), sa.ForeignKey("facilities.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("sport_type", sa.String(20), nullable=False),
        sa.Column("price_per_hour", sa.Numeric(10, 2), nullable=False),
        sa.Column("operating_start_hour", sa.Integer(), nullable=False, server_default=sa.text("6")),
        sa.Column("operating_end_hour", sa.Integer(), nullable=False, server_default=sa.text("22")),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
        sa.CheckConstraint("price_per_hour >= 0", name="check_court_price_non_negative"),
        sa.CheckConstraint(
            "operating_start_hour >= 0 AND operating_end_hour <= 23 "
            "AND operating_start_hour < operating_end_hour",
            name="check_court_operating_hours",
        ),
        sa.CheckConstraint(
            "sport_type IN ('BADMINTON', 'TENNIS', 'FOOTBALL', 'CRICKET', 'BASKETBALL', "
            "'TABLE_TENNIS', 'VOLLEYBALL', 'SQUASH', 'OTHER')",
            name="check_court_sport_type",
        ),
    )
    op.create_index("ix_courts_id", "courts", ["id"])
    op.create_index("ix_courts_facility_id", "courts", ["facility_id"])

    op.create_table(
        "time_slots",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("court_id", sa.Integer(), sa.ForeignKey("courts.id", ondelete="CASCADE"), nullable=False),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=True),
        sa.Column("is_maintenance_blocked", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("maintenance_reason", sa.String(500), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("court_id", "start_time", name="uq_time_slot_court_start"),
        sa.CheckConstraint("end_time > start_time", name="check_time_slot_ordered"),
    )
    op.create_index("ix_time_slots_id", "time_slots", ["id"])
    op.create_index("ix_time_slots_court_id", "time_slots", ["court_id"])
    op.create_index("ix_time_slots_court_range", "time_slots", ["court_id", "start_time", "end_time"])

    op.create_table(
        "court_bookings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "time_slot_id", sa.Integer(), sa.ForeignKey("time_slots.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("court_id", sa.Integer(), sa.ForeignKey("courts.id", ondelete="CASCADE"), nullable=False),
        sa.Column("player_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("total_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'CONFIRMED'")),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancellation_reason", sa.String(500), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "status IN ('CONFIRMED', 'CANCELLED', 'COMPLETED')", name="check_court_booking_status"
        ),
    )
    op.create_index("ix_court_bookings_id", "court_bookings", ["id"])
    op.create_index("ix_court_bookings_time_slot_id", "court_bookings", ["time_slot_id"])
    op.create_index("ix_court_bookings_court_id", "court_bookings", ["court_id"])
    op.create_index("ix_court_bookings_player_id", "court_bookings", ["player_id"])
    # At most one active booking per slot; cancelled rows stay as history
    op.create_index(
        "uq_court_bookings_active_slot",
        "court_bookings",
        ["time_slot_id"],
        unique=True,
        postgresql_where=sa.text("status = 'CONFIRMED'"),
    )

    op.create_table(
        "waitlist_entries",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "time_slot_id", sa.Integer(), sa.ForeignKey("time_slots.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("player_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("time_slot_id", "player_id", name="uq_waitlist_slot_player"),
    )
    op.create_index("ix_waitlist_entries_id", "waitlist_entries", ["id"])
    op.create_index("ix_waitlist_entries_time_slot_id", "waitlist_entries", ["time_slot_id"])
    op.create_index("ix_waitlist_entries_player_id", "waitlist_entries", ["player_id"])

    op.create_table(
        "reports",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("report_type", sa.String(30), nullable=False),
        sa.Column("reason", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("evidence", sa.JSON(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'PENDING'")),
        sa.Column("reporter_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("target_user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=True),
        sa.Column(
            "target_facility_id", sa.Integer(), sa.ForeignKey("facilities.id", ondelete="CASCADE"), nullable=True
        ),
        sa.Column("reviewed_by_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("review_notes", sa.Text(), nullable=True),
        sa.Column("action_taken", sa.String(500), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "(target_user_id IS NULL) <> (target_facility_id IS NULL)", name="check_report_single_target"
        ),
        sa.CheckConstraint(
            "status IN ('PENDING', 'UNDER_REVIEW', 'RESOLVED', 'DISMISSED')", name="check_report_status"
        ),
        sa.CheckConstraint(
            "report_type IN ('INAPPROPRIATE_BEHAVIOR', 'FACILITY_ISSUE', 'FRAUD', 'SPAM', 'OTHER')",
            name="check_report_type",
        ),
    )
    op.create_index("ix_reports_id", "reports", ["id"])
    op.create_index("ix_reports_status", "reports", ["status"])
    op.create_index("ix_reports_reporter_id", "reports", ["reporter_id"])

    op.create_table(
        "facility_reviews",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "facility_id", sa.Integer(), sa.ForeignKey("facilities.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("player_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("comment", sa.Text(), nullable=True),
        sa.Column("verified", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        *_timestamps(),
        sa.UniqueConstraint("facility_id", "player_id", name="uq_review_facility_player"),
        sa.CheckConstraint("rating BETWEEN 1 AND 5", name="check_review_rating_range"),
    )
    op.create_index("ix_facility_reviews_id", "facility_reviews", ["id"])
    op.create_index("ix_facility_reviews_facility_id", "facility_reviews", ["facility_id"])
    op.create_index("ix_facility_reviews_player_id", "facility_reviews", ["player_id"])


def downgrade() -> None:
    op.drop_table("facility_reviews")
    op.drop_table("reports")
    op.drop_table("waitlist_entries")
    op.drop_table("court_bookings")
    op.drop_table("time_slots")
    op.drop_table("courts")
    op.drop_table("facilities")
    op.drop_table("bookings")
    op.drop_table("payments")
    op.drop_table("payment_orders")
    op.drop_table("tickets")
    op.drop_table("events")
    op.drop_table("users")
