from typing import Optional

import httpx
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from app.config import settings


def http_retry(attempts: Optional[int] = None):
    """Retry transport-level failures (timeouts, refused connections); HTTP statuses are not retried."""
    return retry(
        reraise=True,
        stop=stop_after_attempt(attempts or settings.HTTP_RETRY_ATTEMPTS),
        wait=wait_exponential(multiplier=0.3, min=0.3, max=3),
        retry=retry_if_exception_type(httpx.TransportError),
    )


class ServiceClient:
    """Base for the JSON prediction microservices: one base URL, one bounded timeout."""

    def __init__(
        self,
        base_url: str,
        timeout: Optional[float] = None,
        retry_attempts: Optional[int] = None,
        client: Optional[httpx.Client] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout or settings.HTTP_TIMEOUT_SECONDS
        self.retry_attempts = retry_attempts or settings.HTTP_RETRY_ATTEMPTS
        self._http = client or httpx.Client(timeout=self.timeout)

    def close(self):
        self._http.close()

    def get_json(self, path: str, params: dict):
        url = f"{self.base_url}{path}"

        @http_retry(self.retry_attempts)
        def _call():
            resp = self._http.get(url, params=params, timeout=self.timeout)
            resp.raise_for_status()
            return resp.json()

        return _call()
