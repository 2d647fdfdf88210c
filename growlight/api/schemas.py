from __future__ import annotations
from pydantic import BaseModel


class SwitchRequest(BaseModel):
    on: bool
