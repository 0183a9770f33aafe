"""
Fixed-interval completion poller for provider jobs.
"""

import asyncio
import logging
from typing import Callable

from scriptreel.config import VIDEO_POLL_INTERVAL_SECONDS, VIDEO_POLL_MAX_ATTEMPTS
from scriptreel.errors import ConfigurationError, JobFailed, ProviderError, Timeout
from scriptreel.schemas import ProviderResponse

StatusCheck = Callable[[str], ProviderResponse]


class CompletionPoller:
    """
    Queries a job until it completes with a result URL, fails, or runs out of attempts.

    The status check is a blocking callable; it runs in a worker thread so the event loop
    stays free while the provider answers.
    """

    def __init__(self, max_attempts: int = VIDEO_POLL_MAX_ATTEMPTS, interval: float = VIDEO_POLL_INTERVAL_SECONDS):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.interval = interval

    async def run(self, check_status: StatusCheck, provider_job_id: str, provider: str = "provider") -> ProviderResponse:
        for attempt in range(1, self.max_attempts + 1):
            try:
                status = await asyncio.to_thread(check_status, provider_job_id)
            except ConfigurationError:
                raise
            except ProviderError as e:
                # A rejected or unreachable status query costs one attempt
                logging.warning(f"Poll attempt {attempt}/{self.max_attempts} for job {provider_job_id} failed: {e}")
            else:
                if status.status == "completed" and status.result_url:
                    logging.info(f"✅ Job {provider_job_id} completed after {attempt} status checks")
                    return status
                if status.status == "failed":
                    raise JobFailed(provider, status.error or "")
                if status.status == "completed":
                    logging.info(f"Job {provider_job_id} reports completion without a video URL yet")

            if attempt < self.max_attempts:
                await asyncio.sleep(self.interval)

        raise Timeout(
            f"Video generation timed out: job {provider_job_id} not finished after {self.max_attempts} status checks"
        )
