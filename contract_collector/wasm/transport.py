"""
State Query Transports

Carry an already-encoded protobuf query to a node and return the encoded
response. Two transports are available:

- TendermintRpcTransport: JSON-RPC `abci_query` over HTTP(S). Used for
  plain http:// and https:// RPC endpoints.
- GrpcTransport: direct unary call against the node's gRPC server. Used for
  grpc:// (plaintext) and grpcs:// (TLS) endpoints.

The timeout bounds the whole round trip. Transports never retry. Network
errors propagate as raised by requests or grpc; errors reported by the node
itself raise QueryError.
"""

import base64
import itertools
import logging
import threading
from typing import Any, Dict, Optional
from urllib.parse import urlparse

import grpc
import requests

from ..errors import QueryError

# Blocks are usually under 6 seconds, a page query has to finish first
DEFAULT_TIMEOUT = 5.0

GRPC_SCHEMES = ('grpc', 'grpcs')


class StateQueryTransport:
    """Base class: send (path, data) to a node and return response bytes."""

    endpoint: str = ''

    def query(self, path: str, data: bytes) -> bytes:
        raise NotImplementedError

    def close(self) -> None:
        """Release connection resources."""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


class TendermintRpcTransport(StateQueryTransport):
    """
    ABCI query through the Tendermint/CometBFT JSON-RPC endpoint.

    Request:
        {"jsonrpc": "2.0", "id": n, "method": "abci_query",
         "params": {"path": ..., "data": <hex>, "height": "0", "prove": false}}

    The response carries the protobuf payload base64-encoded in
    result.response.value.
    """

    def __init__(
        self,
        endpoint: str,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
        logger: logging.Logger = None,
    ):
        self.endpoint = endpoint
        self._timeout = timeout
        self._session = session or requests.Session()
        self._owns_session = session is None
        self._logger = logger or logging.getLogger(__name__)
        self._ids = itertools.count(1)

    def query(self, path: str, data: bytes) -> bytes:
        payload = {
            'jsonrpc': '2.0',
            'id': next(self._ids),
            'method': 'abci_query',
            'params': {
                'path': path,
                'data': data.hex(),
                'height': '0',
                'prove': False,
            },
        }

        body = self._post(payload)

        if body.get('error'):
            error = body['error']
            raise QueryError(
                f"RPC error from {self.endpoint}: {error.get('message')} {error.get('data', '')}".strip(),
                code=error.get('code'),
            )

        try:
            abci = body['result']['response']
        except (KeyError, TypeError) as e:
            raise QueryError(f"Malformed abci_query response from {self.endpoint}: missing {e}") from e

        code = int(abci.get('code') or 0)
        if code != 0:
            raise QueryError(
                f"abci_query {path} failed with code {code}: {abci.get('log', '')}",
                code=code,
            )

        value = abci.get('value') or ''
        self._logger.debug(f"abci_query {path} returned {len(value)} base64 chars")
        return base64.b64decode(value)

    def _post(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        POST the request and return the decoded JSON body.

        The request runs on a daemon worker joined with the timeout, so the
        whole round trip, including a slowly sent body, ends by the deadline.
        requests alone only bounds each connect and socket read.
        """
        outcome: Dict[str, Any] = {}

        def run():
            try:
                response = self._session.post(self.endpoint, json=payload, timeout=self._timeout)
                response.raise_for_status()
                outcome['body'] = response.json()
            except Exception as e:
                outcome['error'] = e

        worker = threading.Thread(target=run, name='abci-query', daemon=True)
        worker.start()
        worker.join(self._timeout)

        if worker.is_alive():
            raise requests.Timeout(
                f"abci_query to {self.endpoint} did not complete within {self._timeout}s"
            )
        if 'error' in outcome:
            raise outcome['error']
        return outcome['body']

    def close(self) -> None:
        if self._owns_session:
            self._session.close()


class GrpcTransport(StateQueryTransport):
    """Unary gRPC call with raw bytes in and out."""

    def __init__(
        self,
        endpoint: str,
        timeout: float = DEFAULT_TIMEOUT,
        channel: Optional[grpc.Channel] = None,
    ):
        self.endpoint = endpoint
        self._timeout = timeout

        if channel is None:
            parsed = urlparse(endpoint)
            target = parsed.netloc or parsed.path
            if parsed.scheme == 'grpcs':
                channel = grpc.secure_channel(target, grpc.ssl_channel_credentials())
            else:
                channel = grpc.insecure_channel(target)
        self._channel = channel

    def query(self, path: str, data: bytes) -> bytes:
        # No serializers: request and response pass through as bytes
        method = self._channel.unary_unary(path)
        return method(data, timeout=self._timeout)

    def close(self) -> None:
        self._channel.close()


def create_transport(endpoint: str, timeout: float = DEFAULT_TIMEOUT) -> StateQueryTransport:
    """Pick a transport from the endpoint scheme."""
    scheme = urlparse(endpoint).scheme.lower()
    if scheme in GRPC_SCHEMES:
        return GrpcTransport(endpoint, timeout=timeout)
    return TendermintRpcTransport(endpoint, timeout=timeout)
