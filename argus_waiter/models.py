from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class WaitConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    timeout: float = Field(default=1800.0, gt=0)  # 30 minutes
    poll_interval: float = Field(default=5.0, gt=0)


class WaitStatus(str, Enum):
    pending = "pending"
    success = "success"
    failure = "failure"
    malformed = "malformed"


class InstanceStatus(str, Enum):
    create_succeeded = "CREATE_SUCCEEDED"
    create_failed = "CREATE_FAILED"
    update_succeeded = "UPDATE_SUCCEEDED"
    update_failed = "UPDATE_FAILED"
    delete_succeeded = "DELETE_SUCCEEDED"
    delete_failed = "DELETE_FAILED"


CREATE_SUCCESS = InstanceStatus.create_succeeded.value
CREATE_FAIL = InstanceStatus.create_failed.value
UPDATE_SUCCESS = InstanceStatus.update_succeeded.value
UPDATE_FAIL = InstanceStatus.update_failed.value
DELETE_SUCCESS = InstanceStatus.delete_succeeded.value
DELETE_FAIL = InstanceStatus.delete_failed.value


class InstanceOperation(str, Enum):
    """Instance lifecycle operations, each owning its own pair of terminal tokens."""

    create = "create"
    update = "update"
    delete = "delete"

    @property
    def success_token(self) -> str:
        return _INSTANCE_TOKENS[self][0].value

    @property
    def failure_token(self) -> str:
        return _INSTANCE_TOKENS[self][1].value


_INSTANCE_TOKENS = {
    InstanceOperation.create: (InstanceStatus.create_succeeded, InstanceStatus.create_failed),
    InstanceOperation.update: (InstanceStatus.update_succeeded, InstanceStatus.update_failed),
    InstanceOperation.delete: (InstanceStatus.delete_succeeded, InstanceStatus.delete_failed),
}


class ScrapeConfigOperation(str, Enum):
    create = "create"
    delete = "delete"

    @property
    def expects_present(self) -> bool:
        return self is ScrapeConfigOperation.create


class Classification(BaseModel):
    status: WaitStatus
    token: Optional[str] = None
    detail: Optional[str] = None


class InstanceResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    status: Optional[str] = None
    name: Optional[str] = None
    message: Optional[str] = None


class Job(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    job_name: Optional[str] = Field(default=None, alias="jobName")


class ScrapeConfigsResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    data: Optional[List[Job]] = None
