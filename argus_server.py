import random
from datetime import datetime
from typing import Dict, List

import aiohttp
from aiohttp import web
from loguru import logger

from argus_waiter.models import InstanceOperation, InstanceResponse, ScrapeConfigsResponse


class ArgusServer:
    """A fake Argus API whose resources settle after ``completion_time`` seconds."""

    def __init__(
        self,
        instance_id: str = "iid",
        operation: InstanceOperation = InstanceOperation.create,
        completion_time: float = 10.0,
        error_rate: float = 0.1,
    ):
        self.start_time = None
        self.instance_id = instance_id
        self.operation = operation
        self.completion_time = completion_time
        self.error_rate = error_rate
        self.jobs: List[str] = []
        self.pending_jobs: List[str] = []
        self.removed_jobs: List[str] = []
        self.app = web.Application()
        self.app.router.add_get(
            "/v1/projects/{project_id}/instances/{instance_id}", self.handle_instance
        )
        self.app.router.add_get(
            "/v1/projects/{project_id}/instances/{instance_id}/scrapeconfigs",
            self.handle_scrape_configs,
        )
        self.runner = None
        self.logger = logger

    def _elapsed(self) -> float:
        if self.start_time is None:
            self.start_time = datetime.now()
        return (datetime.now() - self.start_time).total_seconds()

    async def handle_instance(self, request):
        instance_id = request.match_info["instance_id"]
        if instance_id != self.instance_id:
            raise web.HTTPNotFound()

        elapsed = self._elapsed()
        if random.random() < self.error_rate:
            status = self.operation.failure_token
            self.logger.info("Returning failed instance status")
        elif elapsed >= self.completion_time:
            status = self.operation.success_token
            self.logger.info("Returning succeeded instance status")
        else:
            status = "PROGRESSING"
            self.logger.info(f"Returning pending instance status (elapsed: {elapsed:.1f}s)")

        return web.json_response({"id": instance_id, "name": "argus", "status": status})

    async def handle_scrape_configs(self, request):
        elapsed = self._elapsed()
        jobs = list(self.jobs)
        if elapsed >= self.completion_time:
            jobs += self.pending_jobs
            jobs = [job for job in jobs if job not in self.removed_jobs]
        else:
            jobs += [job for job in self.removed_jobs if job not in jobs]

        self.logger.info(f"Returning {len(jobs)} scrape configs (elapsed: {elapsed:.1f}s)")
        return web.json_response({"data": [{"jobName": job} for job in jobs]})

    async def start(self, port: int = 8080):
        self.runner = web.AppRunner(self.app)
        await self.runner.setup()
        site = web.TCPSite(self.runner, "localhost", port)
        await site.start()
        self.logger.info(f"Server started on port {port}")
        return site

    async def stop(self):
        if self.runner is not None:
            await self.runner.cleanup()
            self.runner = None


class ArgusServerApi:
    """An ``ArgusApi`` backed by HTTP calls to an :class:`ArgusServer`."""

    def __init__(self, base_url: str, session: aiohttp.ClientSession):
        self.base_url = base_url.rstrip("/")
        self.session = session

    async def _get_json(self, path: str) -> Dict:
        url = f"{self.base_url}{path}"
        async with self.session.get(url) as response:
            response.raise_for_status()
            return await response.json()

    async def get_instance(self, instance_id: str, project_id: str) -> InstanceResponse:
        data = await self._get_json(f"/v1/projects/{project_id}/instances/{instance_id}")
        return InstanceResponse.model_validate(data)

    async def get_scrape_configs(
        self, instance_id: str, project_id: str
    ) -> ScrapeConfigsResponse:
        data = await self._get_json(
            f"/v1/projects/{project_id}/instances/{instance_id}/scrapeconfigs"
        )
        return ScrapeConfigsResponse.model_validate(data)
