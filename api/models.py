from sqlalchemy import Column, DateTime, Float, Index, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class BillingReport(Base):
    __tablename__ = "iaas_billing"

    id = Column(String, primary_key=True)
    account_number = Column(String, nullable=False, index=True)
    account_name = Column(String, nullable=False, default="")
    day = Column(Integer, nullable=False)
    month = Column(String, nullable=False)
    year = Column(Integer, nullable=False)
    service_type = Column(String, nullable=False, index=True)
    usage_quantity = Column(Float, nullable=False, default=0.0)
    cost = Column(Float, nullable=False, default=0.0)
    region = Column(String, nullable=False, default="")
    unit_of_measure = Column(String, nullable=False, default="")
    resource = Column(String, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "account_number",
            "account_name",
            "day",
            "month",
            "year",
            "service_type",
            "region",
            "unit_of_measure",
            "resource",
            name="uq_iaas_billing_charge",
        ),
        Index("idx_iaas_billing_period_resource", "year", "month", "resource"),
    )
