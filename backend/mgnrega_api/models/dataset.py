
# backend/mgnrega_api/models/dataset.py
from sqlalchemy import Column, Integer, String, DateTime, JSON, Float, Index, UniqueConstraint
from sqlalchemy.sql import func
from mgnrega_api.db.database import Base


class DistrictData(Base):
    __tablename__ = "district_data"
    id = Column(Integer, primary_key=True, index=True)
    district = Column(String(128), nullable=False, index=True)
    month = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False)
    person_days = Column(Integer, nullable=False, default=0)
    households = Column(Integer, nullable=False, default=0)
    funds_spent = Column(Float, nullable=False, default=0)
    works_completed = Column(Integer, nullable=False, default=0)
    average_wage = Column(Float, nullable=False, default=0)
    women_participation = Column(Float, nullable=False, default=0)
    raw = Column(JSON)
    fetched_at = Column(DateTime(timezone=True), server_default=func.now())
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("district", "month", "year", name="uq_district_month_year"),
        Index("ix_district_time", "year", "month"),
    )
