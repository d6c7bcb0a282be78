"""MCP bridge over the closing API.

Only the read side is exposed: agents can inspect eligible records, the
review queue, envelopes and reconciliation results, but sealing, label
issuance and review remain with the operator surfaces.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Literal, Protocol

import httpx
from fastmcp import FastMCP

from fechamento_caixa.core.settings import get_settings

logger = logging.getLogger(__name__)

ChannelName = Literal["cash", "pix", "card"]
OpenEnvelopeStatus = Literal["pending", "issued"]
ParamValue = str | int | float | bool | None
ParamsMapping = Mapping[str, ParamValue]


class APIRequester(Protocol):
    async def request(
        self,
        method: str,
        path: str,
        *,
        params: ParamsMapping | None = None,
        json_body: Mapping[str, object] | None = None,
    ) -> object: ...


class APIRequestError(RuntimeError):
    """Non-2xx answer from the closing API, carrying its error body."""

    def __init__(
        self,
        status_code: int,
        *,
        code: str | None = None,
        message: str | None = None,
        details: Any = None,
    ) -> None:
        self.status_code = status_code
        self.code = code
        self.details = details
        text = f"{code}: {message}" if code else message or "no response body"
        if details is not None:
            text = f"{text} (details: {details})"
        super().__init__(f"Closing API answered {status_code}. {text}")

    @classmethod
    def from_response(cls, response: httpx.Response) -> APIRequestError:
        try:
            body = response.json()
        except ValueError:
            return cls(response.status_code, message=response.text.strip() or None)
        if isinstance(body, Mapping) and isinstance(body.get("code"), str):
            return cls(
                response.status_code,
                code=body["code"],
                message=str(body.get("message", "")),
                details=body.get("details"),
            )
        return cls(response.status_code, message=str(body))


@dataclass(slots=True, frozen=True)
class ClosingAPIClient:
    base_url: str
    timeout_seconds: float

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: ParamsMapping | None = None,
        json_body: Mapping[str, object] | None = None,
    ) -> object:
        async with httpx.AsyncClient(
            base_url=self.base_url, timeout=self.timeout_seconds
        ) as client:
            response = await client.request(
                method,
                path,
                params=params,
                json=dict(json_body) if json_body else None,
            )

        if not response.is_success:
            error = APIRequestError.from_response(response)
            logger.warning(
                "closing_api_error",
                extra={
                    "path": path,
                    "status": response.status_code,
                    "code": error.code,
                },
            )
            raise error
        try:
            return response.json()
        except ValueError as exc:
            raise APIRequestError(
                response.status_code, message="response body is not JSON"
            ) from exc


def _query(**values: ParamValue) -> dict[str, ParamValue] | None:
    """Drop unset filters; ``None`` when nothing is left."""

    kept = {key: value for key, value in values.items() if value not in (None, False)}
    return kept or None


def create_mcp_server(
    *,
    api_base_url: str | None = None,
    timeout_seconds: float | None = None,
    requester: APIRequester | None = None,
) -> FastMCP:
    settings = get_settings()
    timeout = (
        settings.mcp_api_timeout_seconds if timeout_seconds is None else timeout_seconds
    )
    if timeout <= 0:
        raise ValueError("MCP API timeout must be greater than zero.")

    api: APIRequester = requester or ClosingAPIClient(
        base_url=(api_base_url or settings.mcp_api_base_url).rstrip("/"),
        timeout_seconds=timeout,
    )
    mcp = FastMCP(name="Fechamento de Caixa")

    @mcp.tool
    async def list_units() -> object:
        """List active laboratory units."""

        return await api.request("GET", "/v1/units")

    @mcp.tool
    async def list_eligible_records(
        channel: ChannelName,
        unit_id: str,
        start_date: str | None = None,
        end_date: str | None = None,
    ) -> object:
        """List records of a channel that are still waiting to be sealed."""

        return await api.request(
            "GET",
            f"/v1/channels/{channel}/eligible",
            params=_query(unit_id=unit_id, start_date=start_date, end_date=end_date),
        )

    @mcp.tool
    async def list_review_envelopes(
        unit_id: str | None = None,
        status: OpenEnvelopeStatus | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
        only_with_difference: bool = False,
    ) -> object:
        """List envelopes awaiting auditor review, newest first."""

        return await api.request(
            "GET",
            "/v1/review/envelopes",
            params=_query(
                unit_id=unit_id,
                status=status,
                start_date=start_date,
                end_date=end_date,
                only_with_difference=only_with_difference,
            ),
        )

    @mcp.tool
    async def get_review_stats(unit_id: str | None = None) -> object:
        """Return review queue counters and pending amounts."""

        return await api.request(
            "GET", "/v1/review/stats", params=_query(unit_id=unit_id)
        )

    @mcp.tool
    async def get_envelope(envelope_id: str) -> object:
        """Return one envelope with its annotations."""

        return await api.request("GET", f"/v1/envelopes/{envelope_id}")

    @mcp.tool
    async def get_reconciliation(
        unit_id: str,
        start_date: str,
        end_date: str,
    ) -> object:
        """Return matched pairs, orphans and duplicates for a period."""

        # ISO dates compare correctly as strings.
        if start_date > end_date:
            raise ValueError("start_date must not be after end_date.")
        return await api.request(
            "GET",
            "/v1/reconciliation",
            params=_query(unit_id=unit_id, start_date=start_date, end_date=end_date),
        )

    return mcp
