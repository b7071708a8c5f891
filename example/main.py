import asyncio

import aiohttp
from argus_server import ArgusServer, ArgusServerApi
from argus_waiter.errors import WaitError, WaitTimeoutError
from argus_waiter.handlers import (
    create_instance_wait_handler,
    create_scrape_config_wait_handler,
)
from argus_waiter.models import WaitConfig


async def status_changed(classification):
    print(f"Status changed to: {classification.token} ({classification.status.value})")


async def main():
    PORT = 8000
    server = ArgusServer(instance_id="iid", completion_time=5.0, error_rate=0.05)
    server.pending_jobs.append("node-exporter")
    await server.start(port=PORT)
    print(f"Server started on http://localhost:{PORT}")

    config = WaitConfig(timeout=30.0, poll_interval=1.0)

    async with aiohttp.ClientSession() as session:
        api = ArgusServerApi(f"http://localhost:{PORT}", session)

        handler = create_instance_wait_handler(
            api, "iid", "pid", config, on_status_change=status_changed
        )
        try:
            instance = await handler.wait()
            print(f"Final instance status: {instance.status}")

            configs = await create_scrape_config_wait_handler(
                api, "iid", "node-exporter", "pid"
            ).configure(timeout=10.0, poll_interval=0.5).wait()
            print(f"Scrape configs: {[job.job_name for job in configs.data]}")
        except WaitTimeoutError as e:
            print(f"Waiting timed out: {e}")
        except WaitError as e:
            print(f"Error occurred: {e}")

    await server.stop()


if __name__ == "__main__":
    asyncio.run(main())
