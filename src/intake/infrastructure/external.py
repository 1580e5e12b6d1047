"""
Intake External Service Integrations
====================================

HTTP transport delivering sanitised submissions to the intake endpoint.
"""

import asyncio
from typing import Any, Dict, Optional

import httpx

from src.config import settings
from src.core import SubmissionFailedError
from src.intake.application.services import GENERIC_FAILURE_MESSAGE, ISubmissionTransport
from src.shared.infrastructure.logging import get_logger, log_latency

logger = get_logger(__name__)


class HttpSubmissionTransport(ISubmissionTransport):
    """
    Intake endpoint client with bounded retry.

    Handles posting submissions with:
    - Exponential backoff retry on network errors and 5xx responses
    - No retry on 4xx (the endpoint has rejected the content)
    - Timeout handling

    Every attempt carries the same headers, so retries share one
    idempotency key.
    """

    def __init__(
        self,
        endpoint_url: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        max_retries: Optional[int] = None,
        backoff_seconds: float = 1.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.endpoint_url = endpoint_url or settings.intake_endpoint_url
        if timeout_seconds is None:
            timeout_seconds = settings.submission_timeout_seconds
        if max_retries is None:
            max_retries = settings.submission_max_retries
        if max_retries < 1:
            raise ValueError(f"max_retries must be at least 1, got {max_retries!r}")
        self.timeout_seconds = timeout_seconds
        self.max_retries = max_retries
        self.backoff_seconds = backoff_seconds
        self._transport = transport
        self._http_client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=self.timeout_seconds,
                transport=self._transport,
            )
        return self._http_client

    async def send(self, payload: Dict[str, Any], headers: Dict[str, str]) -> Dict[str, Any]:
        """
        POST a submission to the intake endpoint.

        Returns:
            The endpoint's JSON body (empty dict if it sent none)

        Raises:
            SubmissionFailedError: After a rejection or the final failed attempt
        """
        if not self.endpoint_url:
            logger.error("Intake endpoint URL not configured")
            raise SubmissionFailedError(
                GENERIC_FAILURE_MESSAGE,
                details={"reason": "intake endpoint not configured"}
            )

        submission_id = headers.get("X-Idempotency-Key")
        failure: Optional[SubmissionFailedError] = None

        for attempt in range(self.max_retries):
            try:
                client = await self._get_client()
                with log_latency(logger, "intake_submission", attempt=attempt + 1):
                    response = await client.post(
                        self.endpoint_url,
                        json=payload,
                        headers=headers
                    )
            except httpx.HTTPError as e:
                logger.error(
                    "Intake submission failed",
                    extra={
                        "error": str(e),
                        "error_type": type(e).__name__,
                        "attempt": attempt + 1,
                        "submission_id": submission_id
                    }
                )
                failure = SubmissionFailedError(
                    GENERIC_FAILURE_MESSAGE,
                    details={"error_type": type(e).__name__, "error": str(e)}
                )
            else:
                if response.is_success:
                    return _json_body(response)

                failure = _rejection(response)
                logger.warning(
                    "Intake endpoint returned non-2xx",
                    extra={
                        "status_code": response.status_code,
                        "attempt": attempt + 1,
                        "submission_id": submission_id
                    }
                )
                if response.status_code < 500:
                    raise failure

            if attempt < self.max_retries - 1:
                await asyncio.sleep(self.backoff_seconds * 2 ** attempt)

        raise failure

    async def close(self) -> None:
        """Close HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None


def _json_body(response: httpx.Response) -> Dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def _rejection(response: httpx.Response) -> SubmissionFailedError:
    """Turn a non-2xx response into a failure, preferring its ``message``."""
    message = _json_body(response).get("message") or f"Server returned {response.status_code}"
    return SubmissionFailedError(
        str(message),
        status_code=response.status_code,
        details={"status_code": response.status_code}
    )
