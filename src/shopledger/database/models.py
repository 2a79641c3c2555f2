"""SQLAlchemy models for the shopledger database."""

from datetime import datetime
from sqlalchemy import (
    BigInteger,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


class DebtAccount(Base):
    """Customer debt account model."""

    __tablename__ = "debt_accounts"

    id = Column(Integer, primary_key=True)
    customer_name = Column(String, nullable=False)
    customer_phone = Column(String, nullable=True)
    due_date = Column(Date, nullable=True)
    total_debt = Column(BigInteger, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.now, nullable=False)
    updated_at = Column(DateTime, default=datetime.now, nullable=False)

    # Relationships
    movements = relationship(
        "DebtMovement",
        back_populates="account",
        cascade="all, delete-orphan",
        order_by="DebtMovement.id",
    )


class DebtMovement(Base):
    """Debt movement (ledger line) model."""

    __tablename__ = "debt_movements"

    id = Column(Integer, primary_key=True)
    debt_account_id = Column(Integer, ForeignKey("debt_accounts.id"), nullable=False)
    kind = Column(String, nullable=False)
    amount = Column(BigInteger, nullable=False)
    note = Column(String, nullable=False)
    occurred_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, default=datetime.now, nullable=False)

    # Relationships
    account = relationship("DebtAccount", back_populates="movements")


class FinancialTransaction(Base):
    """Income/expense journal transaction model."""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    kind = Column(String, nullable=False)
    gross_amount = Column(BigInteger, nullable=False)
    cost_amount = Column(BigInteger, nullable=True)
    note = Column(String, nullable=False)
    category = Column(String, nullable=True)
    occurred_at = Column(DateTime, nullable=False)
    customer_name = Column(String, nullable=True)
    customer_phone = Column(String, nullable=True)
    payment_status = Column(String, nullable=False, default="settled")
    created_at = Column(DateTime, default=datetime.now, nullable=False)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
