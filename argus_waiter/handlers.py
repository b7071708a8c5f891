"""Wait handler factories for Argus instances and scrape configs.

Each factory wires the poll source and classifier for one operation into a
:class:`~argus_waiter.wait_handler.WaitHandler`:

    handler = create_instance_wait_handler(api, instance_id, project_id)
    instance = await handler.configure(timeout=600).wait()
"""

from typing import Any, Awaitable, Callable, Optional

from argus_waiter.classifiers import classify_instance, classify_scrape_configs
from argus_waiter.models import (
    Classification,
    InstanceOperation,
    InstanceResponse,
    ScrapeConfigOperation,
    ScrapeConfigsResponse,
    WaitConfig,
)
from argus_waiter.poll_sources import ArgusApi, InstancePollSource, ScrapeConfigsPollSource
from argus_waiter.wait_handler import WaitHandler

StatusCallback = Callable[[Classification], Awaitable[Any]]


def _instance_wait_handler(
    operation: InstanceOperation,
    api: ArgusApi,
    instance_id: str,
    project_id: str,
    config: Optional[WaitConfig],
    on_status_change: Optional[StatusCallback],
) -> WaitHandler[InstanceResponse]:
    return WaitHandler(
        InstancePollSource(api, instance_id, project_id),
        classify_instance(operation, instance_id),
        config=config,
        on_status_change=on_status_change,
        description=f"instance {instance_id} ({operation.value})",
    )


def _scrape_config_wait_handler(
    operation: ScrapeConfigOperation,
    api: ArgusApi,
    instance_id: str,
    job_name: str,
    project_id: str,
    config: Optional[WaitConfig],
    on_status_change: Optional[StatusCallback],
) -> WaitHandler[ScrapeConfigsResponse]:
    return WaitHandler(
        ScrapeConfigsPollSource(api, instance_id, project_id),
        classify_scrape_configs(operation, job_name),
        config=config,
        on_status_change=on_status_change,
        description=f"scrape config {job_name} of instance {instance_id} ({operation.value})",
    )


def create_instance_wait_handler(
    api: ArgusApi,
    instance_id: str,
    project_id: str,
    config: Optional[WaitConfig] = None,
    on_status_change: Optional[StatusCallback] = None,
) -> WaitHandler[InstanceResponse]:
    return _instance_wait_handler(
        InstanceOperation.create, api, instance_id, project_id, config, on_status_change
    )


def update_instance_wait_handler(
    api: ArgusApi,
    instance_id: str,
    project_id: str,
    config: Optional[WaitConfig] = None,
    on_status_change: Optional[StatusCallback] = None,
) -> WaitHandler[InstanceResponse]:
    return _instance_wait_handler(
        InstanceOperation.update, api, instance_id, project_id, config, on_status_change
    )


def delete_instance_wait_handler(
    api: ArgusApi,
    instance_id: str,
    project_id: str,
    config: Optional[WaitConfig] = None,
    on_status_change: Optional[StatusCallback] = None,
) -> WaitHandler[InstanceResponse]:
    return _instance_wait_handler(
        InstanceOperation.delete, api, instance_id, project_id, config, on_status_change
    )


def create_scrape_config_wait_handler(
    api: ArgusApi,
    instance_id: str,
    job_name: str,
    project_id: str,
    config: Optional[WaitConfig] = None,
    on_status_change: Optional[StatusCallback] = None,
) -> WaitHandler[ScrapeConfigsResponse]:
    return _scrape_config_wait_handler(
        ScrapeConfigOperation.create,
        api,
        instance_id,
        job_name,
        project_id,
        config,
        on_status_change,
    )


def delete_scrape_config_wait_handler(
    api: ArgusApi,
    instance_id: str,
    job_name: str,
    project_id: str,
    config: Optional[WaitConfig] = None,
    on_status_change: Optional[StatusCallback] = None,
) -> WaitHandler[ScrapeConfigsResponse]:
    return _scrape_config_wait_handler(
        ScrapeConfigOperation.delete,
        api,
        instance_id,
        job_name,
        project_id,
        config,
        on_status_change,
    )
