"""
HTTP client for Ollama-compatible provider endpoints.

This module provides HTTP session management, retry logic and error
conversion for the embedding and generation endpoints. Transport failures
and non-2xx responses become ``ProviderUnavailableError``; bodies that are
not valid JSON become ``MalformedProviderResponseError``.
"""

import json
import logging
import time
from typing import Any, Dict, Optional

import requests
from requests.adapters import HTTPAdapter

from ..exceptions import ProviderUnavailableError, MalformedProviderResponseError
from .config import ProviderConfiguration

logger = logging.getLogger(__name__)

_BODY_PREVIEW_LENGTH = 200


class OllamaClient:
    """
    HTTP client with exponential-backoff retries.

    Features:
        - HTTP session reuse with connection pooling
        - Retries on connection errors, timeouts and 5xx responses
        - Immediate failure on 4xx responses
        - Error message extraction from ``{"error": ...}`` bodies

    Thread Safety:
        ``requests.Session`` is shared across threads for POST requests, which
        lets the semantic segmenter fan embedding calls out to a worker pool.
    """

    def __init__(self, config: ProviderConfiguration, session: Optional[requests.Session] = None) -> None:
        """
        Initialize the client.

        Args:
            config: Validated provider configuration
            session: Optional pre-built session (tests inject mocks here)
        """
        self.config = config
        self._session = session or requests.Session()
        self._session.headers.update({
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": "chunk-engine/0.1.0",
        })

        if session is None:
            adapter = HTTPAdapter(
                pool_connections=4,
                pool_maxsize=16,
                max_retries=0  # We handle retries manually
            )
            self._session.mount('http://', adapter)
            self._session.mount('https://', adapter)

    def post_json(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        POST a JSON payload and decode the JSON response.

        Args:
            path: Endpoint path such as ``/api/embeddings``
            payload: JSON-serializable request body

        Returns:
            Decoded response object

        Raises:
            ProviderUnavailableError: On network errors, 4xx, or 5xx after all retries
            MalformedProviderResponseError: If the body is not a JSON object
        """
        url = f"{self.config.base_url}{path}"
        response = self._post_with_retry(url, payload)

        try:
            data = response.json()
        except ValueError as e:
            preview = (response.text or "")[:_BODY_PREVIEW_LENGTH]
            raise MalformedProviderResponseError(
                f"Failed to parse response from {url}: {e}",
                body_preview=preview
            ) from e

        if not isinstance(data, dict):
            raise MalformedProviderResponseError(
                f"Expected a JSON object from {url}, got {type(data).__name__}",
                body_preview=json.dumps(data)[:_BODY_PREVIEW_LENGTH]
            )
        return data

    def _post_with_retry(self, url: str, payload: Dict[str, Any]) -> requests.Response:
        last_exception: Optional[ProviderUnavailableError] = None

        for attempt in range(self.config.max_retries + 1):
            try:
                response = self._session.post(url, json=payload, timeout=self.config.timeout)
            except (requests.ConnectionError, requests.Timeout) as e:
                last_exception = ProviderUnavailableError(f"Failed to send request to {url}: {e}", url=url)
            else:
                if 200 <= response.status_code < 300:
                    return response

                error_msg = self._extract_error_message(response)
                message = f"Provider returned error {response.status_code} for {url}"
                if error_msg:
                    message = f"{message}: {error_msg}"
                error = ProviderUnavailableError(message, status_code=response.status_code, url=url)

                # Client errors will not improve on retry
                if response.status_code < 500:
                    raise error
                last_exception = error

            if attempt < self.config.max_retries:
                delay = self.config.retry_delay * (2 ** attempt)
                logger.debug(f"Retrying {url} in {delay:.2f}s (attempt {attempt + 1}/{self.config.max_retries})")
                time.sleep(delay)

        raise last_exception

    @staticmethod
    def _extract_error_message(response: requests.Response) -> Optional[str]:
        try:
            error_data = response.json()
        except ValueError:
            return None
        if isinstance(error_data, dict) and "error" in error_data:
            error = error_data["error"]
            if isinstance(error, dict):
                return error.get("message", "Unknown provider error")
            return str(error)
        return None

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self._session.close()
