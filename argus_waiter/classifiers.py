from typing import Callable

from argus_waiter.models import (
    Classification,
    InstanceOperation,
    InstanceResponse,
    ScrapeConfigOperation,
    ScrapeConfigsResponse,
    WaitStatus,
)


def classify_instance(
    operation: InstanceOperation, instance_id: str
) -> Callable[[InstanceResponse], Classification]:
    """Build a classifier for the instance lifecycle of the given operation.

    Only the operation's own success and failure tokens are terminal. Any other
    token, including the tokens of other operations, keeps the wait pending.
    """

    def classify(response: InstanceResponse) -> Classification:
        if response.status is None:
            return Classification(status=WaitStatus.malformed, detail="status is not set")
        if response.id is None:
            return Classification(
                status=WaitStatus.malformed, token=response.status, detail="id is not set"
            )
        if response.id != instance_id:
            return Classification(status=WaitStatus.pending, token=response.status)
        if response.status == operation.success_token:
            return Classification(status=WaitStatus.success, token=response.status)
        if response.status == operation.failure_token:
            return Classification(status=WaitStatus.failure, token=response.status)
        return Classification(status=WaitStatus.pending, token=response.status)

    return classify


def classify_scrape_configs(
    operation: ScrapeConfigOperation, job_name: str
) -> Callable[[ScrapeConfigsResponse], Classification]:
    """Build a classifier that checks whether ``job_name`` is in the scrape config list."""

    def classify(response: ScrapeConfigsResponse) -> Classification:
        # Not among the listed scrape config outcomes, which only fail on fetch
        # errors. A missing list cannot be checked for membership either way.
        if response.data is None:
            return Classification(status=WaitStatus.malformed, detail="data is not set")

        present = any(job.job_name == job_name for job in response.data)
        token = "present" if present else "absent"
        if present == operation.expects_present:
            return Classification(status=WaitStatus.success, token=token)
        return Classification(status=WaitStatus.pending, token=token)

    return classify
