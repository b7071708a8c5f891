from typing import Protocol, TypeVar

from argus_waiter.models import InstanceResponse, ScrapeConfigsResponse

T_co = TypeVar("T_co", covariant=True)


class ArgusApi(Protocol):
    """The subset of the Argus API client the waiters read from.

    Implementations must be idempotent and safe to share between concurrently
    running wait handlers.
    """

    async def get_instance(self, instance_id: str, project_id: str) -> InstanceResponse:
        ...

    async def get_scrape_configs(
        self, instance_id: str, project_id: str
    ) -> ScrapeConfigsResponse:
        ...


class PollSource(Protocol[T_co]):
    async def fetch(self) -> T_co:
        ...


class InstancePollSource:
    def __init__(self, api: ArgusApi, instance_id: str, project_id: str):
        self.api = api
        self.instance_id = instance_id
        self.project_id = project_id

    async def fetch(self) -> InstanceResponse:
        return await self.api.get_instance(self.instance_id, self.project_id)


class ScrapeConfigsPollSource:
    def __init__(self, api: ArgusApi, instance_id: str, project_id: str):
        self.api = api
        self.instance_id = instance_id
        self.project_id = project_id

    async def fetch(self) -> ScrapeConfigsResponse:
        return await self.api.get_scrape_configs(self.instance_id, self.project_id)
