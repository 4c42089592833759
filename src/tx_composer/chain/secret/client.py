"""Secret Network LCD client — consensus key and contract code hash lookups.

Provides an async HTTP client for the Secret Network REST API:
- GET /registration/v1beta1/tx-key — consensus IO public key
- GET /compute/v1beta1/code_hash/by_contract_address/{address} — code hash
"""

from __future__ import annotations

import base64
import binascii
from typing import Any

import httpx

from tx_composer.errors.chain_errors import CodeHashLookupError, EndpointError


class SecretLCDClient:
    """Async HTTP client for a Secret Network LCD node.

    Usage::

        lcd = SecretLCDClient("https://lcd.secret.example", chain_id="secret-4")
        await lcd.connect()
        try:
            code_hash = await lcd.code_hash_by_contract_address("secret1...")
        finally:
            await lcd.close()
    """

    def __init__(
        self,
        url: str,
        *,
        chain_id: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the LCD client.

        Args:
            url: LCD base URL.
            chain_id: Chain the node belongs to.
            timeout: Per-request timeout in seconds.
            transport: Optional httpx transport (tests use ``MockTransport``).
        """
        self._url = url.rstrip("/")
        self._chain_id = chain_id
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def connect(self) -> None:
        """Create the underlying HTTP client.

        Raises:
            EndpointError: If the URL cannot be parsed.
        """
        try:
            self._client = httpx.AsyncClient(
                base_url=self._url,
                headers={"Accept": "application/json"},
                timeout=self._timeout,
                transport=self._transport,
            )
        except httpx.InvalidURL as exc:
            msg = f"Invalid LCD URL {self._url!r}: {exc}"
            raise EndpointError(msg) from exc

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def is_connected(self) -> bool:
        """Check if the HTTP client is active."""
        return self._client is not None

    @property
    def url(self) -> str:
        return self._url

    @property
    def chain_id(self) -> str:
        return self._chain_id

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def get_tx_key(self) -> bytes:
        """Fetch the chain's consensus IO public key.

        Returns:
            The 32-byte x25519 public key.

        Raises:
            EndpointError: If the node is unreachable or answers garbage.
        """
        data = await self._get_json("/registration/v1beta1/tx-key", EndpointError)
        try:
            key = base64.b64decode(data["key"], validate=True)
        except (KeyError, TypeError, binascii.Error) as exc:
            msg = f"Invalid tx-key response from {self._url}"
            raise EndpointError(msg) from exc
        if len(key) != 32:
            msg = f"Invalid tx-key length from {self._url}: {len(key)}"
            raise EndpointError(msg)
        return key

    async def code_hash_by_contract_address(self, contract_address: str) -> str:
        """Look up the code hash of the contract at *contract_address*.

        Returns:
            Lowercase hex code hash without a ``0x`` prefix.

        Raises:
            EndpointError: If the node is unreachable.
            CodeHashLookupError: If the node has no code hash for the contract.
        """
        data = await self._get_json(
            f"/compute/v1beta1/code_hash/by_contract_address/{contract_address}",
            CodeHashLookupError,
        )
        code_hash = data.get("code_hash") or ""
        if not code_hash:
            raise CodeHashLookupError("Could not retrieve code hash")
        return normalize_code_hash(code_hash)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _ensure_connected(self) -> httpx.AsyncClient:
        """Return the HTTP client, raising if not connected."""
        if self._client is None:
            msg = "LCD client not connected. Call connect() first."
            raise EndpointError(msg, status_code=500)
        return self._client

    async def _get_json(
        self,
        path: str,
        status_error: type[EndpointError] | type[CodeHashLookupError],
    ) -> dict[str, Any]:
        """GET *path* and decode the JSON body.

        Transport failures always raise ``EndpointError``; non-2xx answers
        raise *status_error* so callers can tell the two apart.
        """
        client = self._ensure_connected()
        try:
            resp = await client.get(path)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            msg = f"LCD request to {self._url} failed: {exc}"
            raise EndpointError(msg) from exc

        if resp.status_code != 200:
            try:
                detail = resp.json().get("message", resp.text)
            except (ValueError, AttributeError):
                detail = resp.text
            msg = f"LCD {path} failed ({resp.status_code}): {detail}"
            raise status_error(msg, status_code=resp.status_code)

        try:
            data = resp.json()
        except ValueError as exc:
            msg = f"LCD {path} returned invalid JSON"
            raise EndpointError(msg) from exc
        return data if isinstance(data, dict) else {}


def normalize_code_hash(code_hash: str) -> str:
    """Strip an optional ``0x`` prefix and lowercase a code hash."""
    code_hash = code_hash.strip()
    if code_hash.lower().startswith("0x"):
        code_hash = code_hash[2:]
    return code_hash.lower()
