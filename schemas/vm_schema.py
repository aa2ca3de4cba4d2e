from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class OsType(str, Enum):
    UBUNTU = "Ubuntu"
    ROCKY_LINUX = "Rocky Linux"
    OPENSUSE = "OpenSUSE"


class ProvisionRequest(BaseModel):
    """
    Body of a lab VM provisioning request.

    Fields are optional at the model level so that a missing field ends up
    as a plain 400 from the handler instead of FastAPI's 422. 'osType' is a
    free string: anything outside OsType falls back to the Ubuntu image.
    """

    model_config = ConfigDict(extra="ignore")

    sessionId: Optional[str] = Field(
        default=None,
        description="Lab session identifier; its first 8 chars name the VM",
    )
    osType: Optional[str] = Field(
        default=None,
        description="One of 'Ubuntu', 'Rocky Linux', 'OpenSUSE'",
    )
    userId: Optional[str] = Field(
        default=None,
        description="Requesting user, stored as a network tag on the VM",
    )

    def missing_fields(self) -> List[str]:
        return [
            name
            for name in ("sessionId", "osType", "userId")
            if not getattr(self, name)
        ]


class ProvisionErrorResponse(BaseModel):
    success: bool = False
    error: str
