# Overview: HTTP client for the remote "apply mutation" endpoint.

"""
Remote delivery contract.

    POST {base_url}/mutations
    Idempotency-Key: <hex>
    {"collection": "...", "operation": "create|update|delete", "payload": {...}}

Any 2xx response confirms delivery. Transport errors, timeouts and non-2xx
statuses raise RemoteDeliveryFailure; callers absorb it by leaving the
mutation queued. The remote is expected to treat a repeated Idempotency-Key
as a no-op.
"""

from __future__ import annotations

import httpx


class RemoteDeliveryFailure(Exception):
    """Remote did not confirm a mutation. Never surfaced to interactive callers."""
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class RemoteClient:
    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 5.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    def deliver(
        self,
        collection: str,
        operation: str,
        payload: dict,
        idempotency_key: str | None = None,
    ) -> None:
        headers = {}
        if idempotency_key:
            headers["Idempotency-Key"] = idempotency_key
        body = {"collection": collection, "operation": operation, "payload": payload}

        try:
            response = self._client.post("/mutations", json=body, headers=headers)
        except httpx.TimeoutException as exc:
            raise RemoteDeliveryFailure(f"Timed out after {self.timeout}s") from exc
        except httpx.HTTPError as exc:
            raise RemoteDeliveryFailure(f"Transport error: {exc}") from exc

        if not response.is_success:
            raise RemoteDeliveryFailure(
                f"Remote rejected {operation} on {collection}: HTTP {response.status_code}",
                status_code=response.status_code,
            )

    def close(self) -> None:
        self._client.close()
