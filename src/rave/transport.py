"""Transports for delivering operation bundles outside a request/response cycle."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import certifi
import httpx

from rave.exceptions import APIError, AuthenticationError


class OperationTransport(ABC):
    """Abstract destination for operation bundles."""

    @abstractmethod
    async def send(self, bundle: dict[str, Any]) -> dict[str, Any]:
        """Deliver one operation bundle.

        Args:
            bundle: Bundle as produced by ``Context.to_dict()``.

        Returns:
            The endpoint's reply.
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close transport and cleanup resources."""
        pass


class HttpTransport(OperationTransport):
    """Posts bundles as JSON to a robot RPC endpoint."""

    def __init__(
        self,
        rpc_url: str,
        access_token: str | None = None,
        *,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            rpc_url: Endpoint accepting operation bundles.
            access_token: Optional bearer token.
            http_transport: Custom httpx transport (used by tests).
        """
        self._rpc_url = rpc_url
        headers = {"Authorization": f"Bearer {access_token}"} if access_token else {}
        self._client = httpx.AsyncClient(
            headers=headers,
            verify=certifi.where(),
            timeout=30.0,
            transport=http_transport,
        )

    def _check_response(self, response: httpx.Response) -> None:
        """Raise for non-success responses.

        Raises:
            AuthenticationError: On 401/403 responses.
            APIError: On other error responses.
        """
        if response.is_success:
            return

        if response.status_code in (401, 403):
            raise AuthenticationError(f"Endpoint rejected credentials: {self._rpc_url}")

        try:
            error_data = response.json()
            message = error_data.get("error", {}).get("message", response.text)
        except (ValueError, AttributeError):
            message = response.text

        raise APIError(response.status_code, message)

    async def send(self, bundle: dict[str, Any]) -> dict[str, Any]:
        response = await self._client.post(self._rpc_url, json=bundle)
        self._check_response(response)
        if not response.content:
            return {}
        return response.json()  # type: ignore[no-any-return]

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()


class LocalFileTransport(OperationTransport):
    """Writes each bundle to ``<output_dir>/bundle-<n>.json``."""

    def __init__(self, output_dir: Path) -> None:
        self._output_dir = output_dir
        self.written: list[Path] = []

    async def send(self, bundle: dict[str, Any]) -> dict[str, Any]:
        self._output_dir.mkdir(parents=True, exist_ok=True)
        path = self._output_dir / f"bundle-{len(self.written) + 1}.json"
        path.write_text(json.dumps(bundle, indent=2, ensure_ascii=False) + "\n")
        self.written.append(path)
        return {"path": str(path)}

    async def close(self) -> None:
        """No cleanup needed for local file transport."""
        pass
