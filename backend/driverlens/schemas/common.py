from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from driverlens.models.enums import SelectionProfile


class DomainModel(BaseModel):
    model_config = ConfigDict(from_attributes=True, use_enum_values=True)


class ReportRequest(BaseModel):
    report: dict[str, Any] = Field(..., description="Monthly profit and loss report in QuickBooks JSON shape.")
    selection_profile: SelectionProfile | None = None
