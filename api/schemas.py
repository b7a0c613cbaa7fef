from typing import Optional

from pydantic import BaseModel, ConfigDict


class ReportRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    account_number: str
    account_name: str
    day: int
    month: str
    year: int
    service_type: str
    usage_quantity: float
    cost: float
    region: str
    unit_of_measure: str
    resource: str


class TotalCostResponse(BaseModel):
    year: int
    month: Optional[str] = None
    resource: Optional[str] = None
    total_cost: float


class GroupedCostResponse(BaseModel):
    key: str
    total_cost: float
    usage_quantity: float
