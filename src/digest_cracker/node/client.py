"""
Typed client for a node's Remote Search Service.
"""
from __future__ import annotations
import logging
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from digest_cracker.config import CLIENT_LOGGER, CONNECT_TIMEOUT, REQUEST_TIMEOUT, SEARCH_REQUEST_TIMEOUT
from digest_cracker.errors import InputValidationError, NodeConnectionError
from digest_cracker.models.models import SearchConfig, SearchResult
from digest_cracker.models.schemas.response import AliveResponse, NodeNameResponse

logger = logging.getLogger(CLIENT_LOGGER)

ModelT = TypeVar("ModelT", bound=BaseModel)


class NodeClient:
    """
    One node, addressed by its base URL.

    Transport failures, timeouts, 404s and server errors all surface as
    NodeConnectionError; a 422 surfaces as InputValidationError.
    """

    def __init__(self,
                 address: str,
                 timeout: float = REQUEST_TIMEOUT,
                 transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.address = address.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def _client(self, timeout: httpx.Timeout) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.address, timeout=timeout,
                                 transport=self._transport)

    async def _request(self, method: str, path: str,
                       timeout: httpx.Timeout | None = None, **kwargs: Any) -> Any:
        timeout = timeout or httpx.Timeout(self.timeout)
        try:
            async with self._client(timeout) as client:
                response = await client.request(method, path, **kwargs)
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status == 422:
                raise InputValidationError(
                    f"node {self.address} rejected the request: {e.response.text}") from e
            if status == 404:
                raise NodeConnectionError(self.address, "service not registered (404)") from e
            raise NodeConnectionError(self.address, f"HTTP {status}") from e
        except httpx.TimeoutException as e:
            raise NodeConnectionError(self.address, f"timed out ({type(e).__name__})") from e
        except httpx.RequestError as e:
            raise NodeConnectionError(self.address, f"unreachable ({type(e).__name__}: {e})") from e
        except ValueError as e:
            # response body was not JSON
            raise NodeConnectionError(self.address, f"invalid response: {e}") from e

    async def start_search(self, config: SearchConfig) -> SearchResult:
        """Blocks until the node finishes its share of the keyspace."""
        logger.debug(f"start_search -> {self.address}: {config}")
        data = await self._request(
            "POST", "/search", json=config.model_dump(),
            timeout=httpx.Timeout(SEARCH_REQUEST_TIMEOUT, connect=CONNECT_TIMEOUT))
        return self._parse(SearchResult, data)

    async def stop_search(self) -> None:
        logger.debug(f"stop_search -> {self.address}")
        await self._request("POST", "/stop")

    async def is_alive(self) -> bool:
        data = await self._request("GET", "/alive")
        return self._parse(AliveResponse, data).alive

    async def get_node_name(self) -> str:
        data = await self._request("GET", "/name")
        return self._parse(NodeNameResponse, data).node_name

    def _parse(self, model: type[ModelT], data: Any) -> ModelT:
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise NodeConnectionError(self.address, f"invalid {model.__name__}: {e}") from e

    def __repr__(self) -> str:
        return f"NodeClient({self.address!r})"
