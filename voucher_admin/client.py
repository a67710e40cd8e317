from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Iterable

import httpx
import structlog

from voucher_admin.schemas.voucher import VoucherResponse
from voucher_admin.settings import settings

logger = structlog.get_logger(__name__)

VOUCHERS_ENDPOINT = "/api/vouchers"


class VoucherApiError(RuntimeError):
    def __init__(self, message: str, *, status_code: int | None = None, code: str | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code


class VoucherConflictError(VoucherApiError):
    pass


class VoucherNotFoundError(VoucherApiError):
    pass


_ERRORS_BY_STATUS: dict[int, type[VoucherApiError]] = {
    404: VoucherNotFoundError,
    409: VoucherConflictError,
}


@dataclass(frozen=True)
class DeleteFailure:
    id: str
    reason: str


@dataclass
class BulkDeleteResult:
    succeeded: list[str] = field(default_factory=list)
    failed: list[DeleteFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


class VoucherApiClient:
    def __init__(
        self,
        base_url: str | None = None,
        *,
        timeout_s: float | None = None,
        http_client: httpx.Client | None = None,
        max_concurrency: int | None = None,
    ) -> None:
        self.base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self.timeout = timeout_s if timeout_s is not None else settings.API_TIMEOUT_SECONDS
        self.max_concurrency = max(1, max_concurrency or settings.BULK_DELETE_MAX_CONCURRENCY)
        self._http_client = http_client

    def _client(self) -> httpx.Client:
        return httpx.Client(
            base_url=self.base_url,
            headers={"Accept": "application/json"},
            timeout=self.timeout,
        )

    def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        if self._http_client:
            return self._http_client.request(method, url, **kwargs)
        with self._client() as client:
            return client.request(method, url, **kwargs)

    def _send(self, method: str, endpoint: str, **kwargs: Any) -> dict[str, Any]:
        action = f"{method} {endpoint}"
        try:
            response = self._request(method, endpoint, **kwargs)
        except httpx.HTTPError as exc:
            logger.error("voucher_request_failed", endpoint=action, error=str(exc))
            raise VoucherApiError("Voucher API request failed.") from exc

        if response.status_code >= 400:
            error = _error_body(response)
            logger.error(
                "voucher_request_error",
                endpoint=action,
                status_code=response.status_code,
                code=error.get("code"),
            )
            error_cls = _ERRORS_BY_STATUS.get(response.status_code, VoucherApiError)
            raise error_cls(
                error.get("message") or "Voucher API returned an error.",
                status_code=response.status_code,
                code=error.get("code"),
            )

        if not response.content:
            return {}
        try:
            payload = response.json()
        except ValueError as exc:
            logger.error("voucher_response_invalid", endpoint=action, status_code=response.status_code)
            raise VoucherApiError("Voucher API returned an invalid response.", status_code=response.status_code) from exc
        if not isinstance(payload, dict):
            return {}
        return payload.get("data") or {}

    def list_vouchers(self) -> list[VoucherResponse]:
        data = self._send("GET", VOUCHERS_ENDPOINT)
        return [VoucherResponse.model_validate(item) for item in data.get("vouchers", [])]

    def get_voucher(self, voucher_id: str) -> VoucherResponse:
        data = self._send("GET", f"{VOUCHERS_ENDPOINT}/{voucher_id}")
        return VoucherResponse.model_validate(data["voucher"])

    def create_voucher(self, payload: dict[str, Any]) -> VoucherResponse:
        data = self._send("POST", VOUCHERS_ENDPOINT, json=payload)
        return VoucherResponse.model_validate(data["voucher"])

    def update_voucher(self, voucher_id: str, payload: dict[str, Any]) -> VoucherResponse:
        data = self._send("PATCH", f"{VOUCHERS_ENDPOINT}/{voucher_id}", json=payload)
        return VoucherResponse.model_validate(data["voucher"])

    def delete_voucher(self, voucher_id: str) -> None:
        self._send("DELETE", f"{VOUCHERS_ENDPOINT}/{voucher_id}")

    def bulk_delete(self, voucher_ids: Iterable[str]) -> BulkDeleteResult:
        """Fire one delete per id concurrently and collect every outcome.

        Nothing is rolled back when an item fails; the result says which
        deletions landed.
        """
        ids = [str(voucher_id) for voucher_id in voucher_ids]
        result = BulkDeleteResult()
        if not ids:
            return result

        with ThreadPoolExecutor(max_workers=min(self.max_concurrency, len(ids))) as pool:
            futures = [(voucher_id, pool.submit(self.delete_voucher, voucher_id)) for voucher_id in ids]
            for voucher_id, future in futures:
                try:
                    future.result()
                except VoucherApiError as exc:
                    result.failed.append(DeleteFailure(id=voucher_id, reason=exc.code or str(exc)))
                except Exception as exc:
                    logger.error("voucher_delete_failed", voucher_id=voucher_id, error=repr(exc))
                    result.failed.append(DeleteFailure(id=voucher_id, reason=type(exc).__name__))
                else:
                    result.succeeded.append(voucher_id)

        if result.failed:
            logger.warning("voucher_bulk_delete_partial", succeeded=len(result.succeeded), failed=len(result.failed))
        return result


def _error_body(response: httpx.Response) -> dict[str, Any]:
    try:
        payload = response.json()
    except ValueError:
        return {}
    if isinstance(payload, dict) and isinstance(payload.get("error"), dict):
        return payload["error"]
    return {}
