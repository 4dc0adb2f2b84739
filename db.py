# db.py
from datetime import datetime, timezone

from sqlalchemy import JSON, DateTime, Integer, String, Text, UniqueConstraint, create_engine
from sqlalchemy.orm import declarative_base, mapped_column, sessionmaker

Base = declarative_base()


def _now():
    return datetime.now(timezone.utc)


class OfferRecord(Base):
    __tablename__ = "offers"
    id = mapped_column(Integer, primary_key=True, autoincrement=True)
    name = mapped_column(String, nullable=False)
    value_props = mapped_column(JSON, nullable=False)
    ideal_use_cases = mapped_column(JSON, nullable=False)
    created_at = mapped_column(DateTime(timezone=True), default=_now, index=True)


class LeadRecord(Base):
    __tablename__ = "leads"
    __table_args__ = (UniqueConstraint("name", "company", "linkedin_bio", name="uq_lead_identity"),)

    id = mapped_column(Integer, primary_key=True, autoincrement=True)
    name = mapped_column(String, nullable=False, default="")
    role = mapped_column(String, nullable=False, default="")
    company = mapped_column(String, nullable=False, default="")
    industry = mapped_column(String, nullable=False, default="")
    location = mapped_column(String, nullable=False, default="")
    linkedin_bio = mapped_column(Text, nullable=False, default="")
    intent = mapped_column(String(16), nullable=True, index=True)  # NULL means unscored
    score = mapped_column(Integer, nullable=True)
    reasoning = mapped_column(Text, nullable=True)
    created_at = mapped_column(DateTime(timezone=True), default=_now, index=True)


def make_session_factory(database_url: str):
    connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
    engine = create_engine(database_url, connect_args=connect_args)
    Base.metadata.create_all(bind=engine)
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
