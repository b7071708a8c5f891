import asyncio
from typing import AsyncGenerator

import aiohttp
import pytest
import pytest_asyncio
from argus_server import ArgusServer, ArgusServerApi
from argus_waiter.errors import OperationFailedError, TransportFailureError, WaitTimeoutError
from argus_waiter.handlers import (
    create_instance_wait_handler,
    create_scrape_config_wait_handler,
    delete_instance_wait_handler,
    delete_scrape_config_wait_handler,
)
from argus_waiter.models import (
    CREATE_SUCCESS,
    DELETE_SUCCESS,
    InstanceOperation,
    WaitConfig,
)

BASE_URL_TEMPLATE = "http://localhost:{}"


@pytest_asyncio.fixture
async def server(unused_tcp_port_factory) -> AsyncGenerator[ArgusServer, None]:
    """Start and yield a test ArgusServer instance on a random port."""
    port = unused_tcp_port_factory()
    server_instance = ArgusServer(instance_id="iid", completion_time=0.5, error_rate=0.0)
    await server_instance.start(port=port)
    try:
        yield server_instance, port
    finally:
        await server_instance.stop()


@pytest_asyncio.fixture
async def session() -> AsyncGenerator[aiohttp.ClientSession, None]:
    async with aiohttp.ClientSession() as client_session:
        yield client_session


@pytest.fixture
def config() -> WaitConfig:
    """Provide a short configuration for the handlers."""
    return WaitConfig(timeout=5.0, poll_interval=0.1)


@pytest.mark.asyncio
async def test_instance_created(server, session, config):
    """Test normal successful creation flow."""
    status_changes = []
    server_instance, port = server

    async def status_callback(classification):
        status_changes.append(classification.token)

    api = ArgusServerApi(BASE_URL_TEMPLATE.format(port), session)
    handler = create_instance_wait_handler(
        api, "iid", "pid", config, on_status_change=status_callback
    )

    result = await handler.wait()

    assert result.id == "iid"
    assert result.status == CREATE_SUCCESS
    assert status_changes == ["PROGRESSING", CREATE_SUCCESS]


@pytest.mark.asyncio
async def test_instance_deleted(server, session, config):
    server_instance, port = server
    server_instance.operation = InstanceOperation.delete

    api = ArgusServerApi(BASE_URL_TEMPLATE.format(port), session)
    result = await delete_instance_wait_handler(api, "iid", "pid", config).wait()

    assert result.status == DELETE_SUCCESS


@pytest.mark.asyncio
async def test_error_scenario(server, session, config):
    """Test failure status with high error rate."""
    server_instance, port = server
    server_instance.error_rate = 1.0

    api = ArgusServerApi(BASE_URL_TEMPLATE.format(port), session)
    with pytest.raises(OperationFailedError) as exc_info:
        await create_instance_wait_handler(api, "iid", "pid", config).wait()

    assert exc_info.value.token == InstanceOperation.create.failure_token


@pytest.mark.asyncio
async def test_timeout_scenario(server, session, config):
    """Test timeout handling."""
    server_instance, port = server
    server_instance.completion_time = 30.0

    api = ArgusServerApi(BASE_URL_TEMPLATE.format(port), session)
    handler = create_instance_wait_handler(api, "iid", "pid", config)

    with pytest.raises(TimeoutError):
        await handler.configure(timeout=1.0).wait()


@pytest.mark.asyncio
async def test_unknown_instance(server, session, config):
    server_instance, port = server

    api = ArgusServerApi(BASE_URL_TEMPLATE.format(port), session)
    with pytest.raises(TransportFailureError) as exc_info:
        await create_instance_wait_handler(api, "unknown", "pid", config).wait()

    assert isinstance(exc_info.value.cause, aiohttp.ClientResponseError)
    assert exc_info.value.cause.status == 404


@pytest.mark.asyncio
async def test_server_unavailable(session, config):
    """Test behavior when server is not available."""
    api = ArgusServerApi("http://localhost:9999", session)  # Invalid port

    with pytest.raises(TransportFailureError) as exc_info:
        await create_instance_wait_handler(api, "iid", "pid", config).wait()

    assert isinstance(exc_info.value.cause, aiohttp.ClientConnectionError)


@pytest.mark.asyncio
async def test_scrape_config_created(server, session, config):
    server_instance, port = server
    server_instance.jobs.append("other-job")
    server_instance.pending_jobs.append("job")

    api = ArgusServerApi(BASE_URL_TEMPLATE.format(port), session)
    result = await create_scrape_config_wait_handler(api, "iid", "job", "pid", config).wait()

    assert sorted(job.job_name for job in result.data) == ["job", "other-job"]


@pytest.mark.asyncio
async def test_scrape_config_deleted(server, session, config):
    server_instance, port = server
    server_instance.jobs.append("other-job")
    server_instance.removed_jobs.append("job")

    api = ArgusServerApi(BASE_URL_TEMPLATE.format(port), session)
    result = await delete_scrape_config_wait_handler(api, "iid", "job", "pid", config).wait()

    assert [job.job_name for job in result.data] == ["other-job"]


@pytest.mark.asyncio
async def test_multiple_handlers(server, session, config):
    """Test multiple handlers polling simultaneously."""
    server_instance, port = server
    api = ArgusServerApi(BASE_URL_TEMPLATE.format(port), session)

    results = await asyncio.gather(
        *[create_instance_wait_handler(api, "iid", "pid", config).wait() for _ in range(3)]
    )

    assert all(result.status == CREATE_SUCCESS for result in results)
