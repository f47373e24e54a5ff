"""JSON-RPC client for Sui normalized module descriptors.

One fallible call per fetch, bounded by the configured timeout and never
retried; callers decide whether to retry or fall back.
"""

import logging
from typing import Any

import httpx

from movegov.analyzers.base import RPCError
from movegov.analyzers.normalized import GovernanceInfo, find_governance_module
from movegov.config import RPCConfig

logger = logging.getLogger(__name__)

NORMALIZED_MODULES_METHOD = "sui_getNormalizedMoveModulesByPackage"


class SuiRPCClient:
    """HTTP client for the Sui JSON-RPC read API.

    Provides methods to:
    - Fetch every normalized module of a published package
    - Locate a deployed governance module inside a package

    Usage:
        with SuiRPCClient(config.rpc) as client:
            modules = client.get_normalized_move_modules_by_package(package_id)
    """

    def __init__(
        self,
        config: RPCConfig | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Endpoint URL and timeout (defaults if None)
            transport: Optional httpx transport (used by tests)
        """
        self.config = config or RPCConfig()
        self.client = httpx.Client(timeout=self.config.timeout, transport=transport)
        self._request_id = 0

    def __enter__(self) -> "SuiRPCClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying HTTP connection pool."""
        self.client.close()

    def call(self, method: str, params: list[Any]) -> Any:
        """Perform one JSON-RPC call.

        Args:
            method: JSON-RPC method name
            params: Positional parameters

        Returns:
            The ``result`` member of the response

        Raises:
            RPCError: On transport failure, timeout, HTTP error status, a
                malformed envelope, or a JSON-RPC ``error`` member
        """
        self._request_id += 1
        payload = {
            "jsonrpc": "2.0",
            "id": self._request_id,
            "method": method,
            "params": params,
        }

        logger.debug("RPC %s -> %s", method, self.config.url)

        try:
            response = self.client.post(
                self.config.url,
                json=payload,
                headers={"Content-Type": "application/json"},
            )
        except httpx.TimeoutException as e:
            raise RPCError(f"timed out after {self.config.timeout}s") from e
        except httpx.HTTPError as e:
            raise RPCError(str(e)) from e

        return self._handle_response(response)

    def _handle_response(self, response: httpx.Response) -> Any:
        """Validate a JSON-RPC response and return its result.

        Raises:
            RPCError: If the response is an error of any kind
        """
        try:
            data = response.json()
        except ValueError:
            data = None

        if response.status_code >= 400:
            raise RPCError(
                f"HTTP error {response.reason_phrase}".strip(),
                response.status_code,
                data if data is not None else response.text,
            )

        if not isinstance(data, dict) or data.get("jsonrpc") != "2.0":
            raise RPCError("Invalid JSON-RPC response", response.status_code, data)

        if data.get("error"):
            error = data["error"]
            message = error.get("message", "Unknown error") if isinstance(error, dict) else error
            raise RPCError(str(message), response.status_code, data)

        return data.get("result")

    def get_normalized_move_modules_by_package(self, package_id: str) -> dict[str, Any]:
        """Fetch the normalized descriptor of every module in a package.

        Args:
            package_id: Package object ID (``0x...``)

        Returns:
            Mapping of module name to module descriptor

        Raises:
            RPCError: If the call fails or the result is not a mapping
        """
        logger.info("Fetching normalized modules for package %s", package_id)
        result = self.call(NORMALIZED_MODULES_METHOD, [package_id])

        if not isinstance(result, dict):
            raise RPCError("Invalid JSON-RPC response: result is not a module mapping")

        logger.debug("Package %s has modules: %s", package_id, ", ".join(result))
        return result

    def get_governance_info(self, package_id: str) -> GovernanceInfo | None:
        """Locate the governance module of a deployed package.

        Args:
            package_id: Package object ID

        Returns:
            GovernanceInfo, or None if no module exposes ``create_proposal``

        Raises:
            RPCError: If the call fails
        """
        return find_governance_module(self.get_normalized_move_modules_by_package(package_id))

    def find_governance_module_name(self, package_id: str) -> str | None:
        """Return only the governance module name of a package, if any."""
        info = self.get_governance_info(package_id)
        return info.module_name if info else None
