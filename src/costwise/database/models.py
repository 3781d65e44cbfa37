"""SQLAlchemy models for costwise database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Float,
    JSON,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


class Transaction(Base):
    """Transaction model."""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    date = Column(Date, nullable=False, index=True)
    description = Column(String, nullable=True)
    amount = Column(Numeric(14, 2), nullable=False)
    category = Column(String, nullable=True)
    type = Column(String, nullable=False, index=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    classification = relationship(
        "TransactionClassification",
        back_populates="transaction",
        uselist=False,
        cascade="all, delete-orphan",
    )


class BusinessProfile(Base):
    """Business profile model. One row per store."""

    __tablename__ = "business_profiles"

    id = Column(Integer, primary_key=True)
    category = Column(String, nullable=False, default="General")
    business_model = Column(String, nullable=False, default="")
    core_activities = Column(JSON, nullable=False, default=list)
    revenue_streams = Column(JSON, nullable=False, default=list)
    cost_centers = Column(JSON, nullable=False, default=list)
    size_scale = Column(String, nullable=True)
    revenue_range = Column(String, nullable=True)
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )


class CostPattern(Base):
    """Pattern library entry."""

    __tablename__ = "cost_patterns"

    id = Column(Integer, primary_key=True)
    pattern_name = Column(String, unique=True, nullable=False)
    business_category = Column(String, nullable=False, index=True)
    keywords = Column(JSON, nullable=False, default=list)
    typical_cost_type = Column(String, nullable=False)
    typical_cost_nature = Column(String, nullable=False)
    relevance_weight = Column(Float, nullable=False, default=1.0)


class CustomClassificationRule(Base):
    """User custom keyword rule."""

    __tablename__ = "custom_classification_rules"

    id = Column(Integer, primary_key=True)
    owner = Column(String, nullable=False, default="default")
    business_category = Column(String, nullable=False, index=True)
    keyword = Column(String, nullable=False)
    cost_type = Column(String, nullable=False)
    cost_nature = Column(String, nullable=False)
    confidence_score = Column(Float, nullable=False, default=0.8)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class TransactionClassification(Base):
    """Stored classification, at most one per transaction."""

    __tablename__ = "transaction_classifications"

    id = Column(Integer, primary_key=True)
    transaction_id = Column(Integer, ForeignKey("transactions.id"), nullable=False)
    cost_type = Column(String, nullable=False)
    cost_nature = Column(String, nullable=False)
    confidence = Column(Float, nullable=False)
    source = Column(String, nullable=False, default="automatic")
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )

    __table_args__ = (UniqueConstraint("transaction_id", name="uq_classification_transaction"),)

    # Relationships
    transaction = relationship("Transaction", back_populates="classification")


class AnalyticsMetric(Base):
    """Daily analytics metric row."""

    __tablename__ = "analytics_metrics"

    id = Column(Integer, primary_key=True)
    metric_date = Column(Date, nullable=False)
    total_revenue = Column(Numeric(14, 2), nullable=False, default=0)
    total_expenses = Column(Numeric(14, 2), nullable=False, default=0)
    gross_profit = Column(Numeric(14, 2), nullable=False, default=0)
    net_profit = Column(Numeric(14, 2), nullable=False, default=0)
    fixed_costs = Column(Numeric(14, 2), nullable=False, default=0)
    variable_costs = Column(Numeric(14, 2), nullable=False, default=0)
    direct_costs = Column(Numeric(14, 2), nullable=False, default=0)
    indirect_costs = Column(Numeric(14, 2), nullable=False, default=0)
    transaction_count = Column(Integer, nullable=False, default=0)

    __table_args__ = (UniqueConstraint("metric_date", name="uq_metric_date"),)


class Budget(Base):
    """Budget model."""

    __tablename__ = "budgets"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    category = Column(String, nullable=False, index=True)
    allocated_amount = Column(Numeric(14, 2), nullable=False)
    spent_amount = Column(Numeric(14, 2), nullable=False, default=0)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    period = Column(String, nullable=False, default="monthly")
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    connect_args = {}
    if database_url.startswith("sqlite"):
        # Sessions are per thread, but pooled connections can move between threads
        connect_args["check_same_thread"] = False
        connect_args["timeout"] = 30
    engine = create_engine(database_url, echo=False, connect_args=connect_args)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
