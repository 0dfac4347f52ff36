from typing import Literal

from pydantic import BaseModel


class SystemHealth(BaseModel):
    name: str
    status: Literal["healthy", "degraded", "down"]
    message: str
