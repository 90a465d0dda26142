# planner/schemas/project_schema.py

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

HEX_COLOR = r"^#[0-9a-fA-F]{6}$"


# --------- Base schema (common fields) ---------
class ProjectBase(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    color: Optional[str] = Field(default=None, pattern=HEX_COLOR)


# --------- For creating a project (POST) ---------
class ProjectCreate(ProjectBase):
    start_date: date
    end_date: date

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must be on or after start_date")
        return self


# --------- For updating a project (PATCH) ---------
class ProjectUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    color: Optional[str] = Field(default=None, pattern=HEX_COLOR)
    start_date: Optional[date] = None
    end_date: Optional[date] = None


# --------- For reading a project (GET responses) ---------
class ProjectRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    owner_id: int
    name: str
    description: Optional[str] = None
    color: str
    start_date: date
    end_date: date
    created_at: datetime
    updated_at: Optional[datetime] = None
