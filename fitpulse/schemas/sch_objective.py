from pydantic import BaseModel, Field
from typing import List
from fitpulse.models.mod_user import Objective

class ObjectiveCreate(BaseModel):
    name: str = Field(min_length=1)

class ObjectiveLinkRequest(BaseModel):
    objective_ids: List[int] = Field(min_length=1)

class ObjectivesResponse(BaseModel):
    all: List[Objective]
    mine: List[Objective]
