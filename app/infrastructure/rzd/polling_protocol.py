from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable

import httpx

from app.application.dto.polling import Endpoint, Failed, Identity, PollJob, PollOutcome, Ready
from app.application.exceptions import (
    DecodeError,
    PollBudgetExhausted,
    TransportError,
    UpstreamRejected,
)
from app.application.ports.identity import IdentityProviderPort

JOB_FIELD = "RID"
RESULT_FIELD = "result"
FAIL_SENTINEL = "FAIL"


class _Rejected(Exception):
    """Internal signal: upstream refused this attempt, the caller may rotate and retry."""

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class PollingProtocol:
    """
    Submit/poll client shared by every upstream query.

    Upstream either answers synchronously or hands back a job id (RID) that has to be
    POSTed back to the same path until the real document shows up. Blocked statuses and
    explicit FAIL results are retried with a fresh outbound identity while the caller's
    retry budget lasts; the poll loop has its own fixed cap.
    """

    def __init__(
        self,
        identities: IdentityProviderPort,
        client: httpx.AsyncClient | None = None,
        poll_interval: float = 2.0,
        poll_max_attempts: int = 5,
        blocked_statuses: tuple[int, ...] = (403, 429),
        timeout: float = 15.0,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._identities = identities
        self._client = client or httpx.AsyncClient(timeout=timeout, follow_redirects=True)
        self._poll_interval = poll_interval
        self._poll_max_attempts = poll_max_attempts
        self._blocked_statuses = set(blocked_statuses)
        self._sleep = sleep
        self._logger = logging.getLogger(__name__)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def submit(self, endpoint: Endpoint, params: dict[str, str], retry_budget: int) -> PollOutcome:
        budget = retry_budget
        while True:
            try:
                document = await self._request(endpoint, "GET", params=params)
                job_id = document.get(JOB_FIELD)
                if job_id is None:
                    return Ready(document)
                job = PollJob(job_id=str(job_id), attempts_remaining=self._poll_max_attempts)
                return Ready(await self._poll(endpoint, job))
            except _Rejected as e:
                if budget <= 0:
                    self._logger.warning(
                        "Upstream retry budget exhausted",
                        extra={"endpoint": endpoint.name, "reason": e.detail},
                    )
                    return Failed(UpstreamRejected("exhausted retry budget"))
                budget -= 1
                self._logger.warning(
                    "Upstream rejected request, rotating identity",
                    extra={"endpoint": endpoint.name, "reason": e.detail, "attempt": retry_budget - budget},
                )
            except (TransportError, DecodeError, PollBudgetExhausted) as e:
                return Failed(e)

    async def _poll(self, endpoint: Endpoint, job: PollJob) -> dict[str, Any]:
        while job.attempts_remaining > 0:
            await self._sleep(self._poll_interval)
            job.attempts_remaining -= 1
            document = await self._request(
                endpoint,
                "POST",
                params=dict(endpoint.poll_params),
                data={"rid": job.job_id},
            )
            if document.get(JOB_FIELD) is None:
                return document
            self._logger.debug(
                "Poll job still pending",
                extra={
                    "endpoint": endpoint.name,
                    "job_id": job.job_id,
                    "attempt": self._poll_max_attempts - job.attempts_remaining,
                },
            )

        self._logger.warning("Poll job never completed", extra={"endpoint": endpoint.name, "job_id": job.job_id})
        raise PollBudgetExhausted("exhausted polling budget")

    async def _request(
        self,
        endpoint: Endpoint,
        method: str,
        params: dict[str, str],
        data: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        identity: Identity = self._identities.next()
        headers = {"User-Agent": identity.user_agent, "Accept": "application/json"}
        try:
            resp = await self._client.request(method, endpoint.url, params=params, data=data, headers=headers)
        except httpx.HTTPError as e:
            raise TransportError(f"Error on fetching info from {endpoint.name}: {e}") from e

        self._logger.debug(
            "Upstream answered",
            extra={"endpoint": endpoint.name, "status": resp.status_code},
        )
        if resp.status_code in self._blocked_statuses:
            raise _Rejected(f"blocked with status {resp.status_code}")
        if resp.status_code != 200:
            raise TransportError(f"Invalid response code from {endpoint.name}: {resp.status_code}")

        try:
            document = resp.json()
        except ValueError as e:
            raise DecodeError(f"Error on decoding {endpoint.name} response: {e}") from e
        if not isinstance(document, dict):
            raise DecodeError(f"Unexpected {endpoint.name} response: expected an object")

        if document.get(RESULT_FIELD) == FAIL_SENTINEL:
            raise _Rejected("upstream returned FAIL")
        return document
