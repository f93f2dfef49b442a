"""SQLAlchemy models for moneytracker database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Boolean,
    Enum,
    Index,
    UniqueConstraint,
    create_engine,
    text,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

from moneytracker.config import settings
from moneytracker.domain.entities import NotificationType, PaymentMethod, TransactionSource

Base = declarative_base()


class User(Base):
    """User model, including the mailbox credentials used for ingestion."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    username = Column(String, unique=True, nullable=False)
    email = Column(String, nullable=True)
    timezone = Column(String, nullable=False, default="UTC")
    email_notifications_enabled = Column(Boolean, default=True, nullable=False)

    email_parsing_enabled = Column(Boolean, default=False, nullable=False)
    email_imap_host = Column(String, nullable=True)
    email_imap_username = Column(String, nullable=True)
    email_imap_password = Column(String, nullable=True)
    email_imap_port = Column(
        Integer, default=lambda: settings.default_imap_port, nullable=False
    )

    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    categories = relationship("Category", back_populates="user", cascade="all, delete-orphan")
    transactions = relationship("Transaction", back_populates="user", cascade="all, delete-orphan")
    notifications = relationship("Notification", back_populates="user", cascade="all, delete-orphan")


class Category(Base):
    """Category model, unique by name per user."""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    icon_name = Column(String, nullable=True)
    color_code = Column(String, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (UniqueConstraint("user_id", "name", name="uq_category_user_name"),)

    # Relationships
    user = relationship("User", back_populates="categories")
    transactions = relationship("Transaction", back_populates="category")


class Transaction(Base):
    """Transaction model."""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    description = Column(String, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    date = Column(Date, nullable=False)
    payment_method = Column(Enum(PaymentMethod, native_enum=False), nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False)
    source = Column(
        Enum(TransactionSource, native_enum=False),
        default=TransactionSource.MANUAL,
        nullable=False,
    )
    source_reference = Column(String, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # One transaction per message id per user; CSV rows share their filename
    __table_args__ = (
        Index(
            "uq_transaction_user_email_reference",
            "user_id",
            "source_reference",
            unique=True,
            sqlite_where=text("source = 'EMAIL_PARSED'"),
            postgresql_where=text("source = 'EMAIL_PARSED'"),
        ),
    )

    # Relationships
    user = relationship("User", back_populates="transactions")
    category = relationship("Category", back_populates="transactions")


class Notification(Base):
    """Notification model."""

    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    type = Column(Enum(NotificationType, native_enum=False), nullable=False)
    title = Column(String, nullable=False)
    message = Column(Text, nullable=False)
    is_read = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)
    read_at = Column(DateTime, nullable=True)

    # Relationships
    user = relationship("User", back_populates="notifications")


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    connect_args = {}
    if database_url.startswith("sqlite"):
        # Sessions are thread-local but connections may move between pool threads
        connect_args["check_same_thread"] = False
    engine = create_engine(database_url, echo=False, connect_args=connect_args)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
