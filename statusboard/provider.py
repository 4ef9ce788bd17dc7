"""
Data provider client for Apex Status Board.

Reads the battle royale map rotation and the crafter rotation from the
provider's JSON API. The client is read-only.
"""

import json
from typing import Any, Dict, List, Optional
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

from .constants import logger, DEFAULT_FETCH_TIMEOUT, PROVIDER_BASE_URL, USER_AGENT
from .errors import ProviderError
from .models import Bundle, MapRotation, parse_bundles


class ApexProvider:
    """Client for the map rotation and crafter endpoints."""

    def __init__(
        self,
        auth_token: str,
        base_url: str = PROVIDER_BASE_URL,
        timeout: float = DEFAULT_FETCH_TIMEOUT,
    ):
        self.auth_token = auth_token
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout

    def get_map_rotation(self) -> MapRotation:
        payload = self._get_json('/maprotation', {'version': '2'})
        if not isinstance(payload, dict):
            raise ProviderError(f"Unexpected map rotation payload: {type(payload).__name__}")
        try:
            rotation = MapRotation.from_json(payload)
        except (TypeError, ValueError, AttributeError) as e:
            raise ProviderError(f"Malformed map rotation payload: {e}") from e
        logger.info(
            f"Map rotation: current={rotation.current.map_name if rotation.current else 'unknown'} "
            f"next={rotation.next.map_name if rotation.next else 'unknown'}"
        )
        return rotation

    def get_crafter_rotation(self) -> List[Bundle]:
        payload = self._get_json('/crafting')
        if not isinstance(payload, list):
            raise ProviderError(f"Unexpected crafter payload: {type(payload).__name__}")
        try:
            bundles = parse_bundles(payload)
        except (TypeError, ValueError, AttributeError) as e:
            raise ProviderError(f"Malformed crafter payload: {e}") from e
        logger.info(f"Crafter rotation: {len(bundles)} bundles")
        return bundles

    def _get_json(self, endpoint: str, params: Optional[Dict[str, str]] = None) -> Any:
        query = {'auth': self.auth_token}
        query.update(params or {})
        url = f"{self.base_url}{endpoint}?{urlencode(query)}"

        req = Request(url, headers={'User-Agent': USER_AGENT, 'Accept': 'application/json'})
        try:
            with urlopen(req, timeout=self.timeout) as response:
                body = response.read()
        except HTTPError as e:
            raise ProviderError(f"Provider request {endpoint} failed: HTTP {e.code}") from e
        except URLError as e:
            raise ProviderError(f"Provider request {endpoint} failed: {e.reason}") from e
        except OSError as e:
            raise ProviderError(f"Provider request {endpoint} failed: {e}") from e

        try:
            payload = json.loads(body.decode('utf-8'))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ProviderError(f"Provider response for {endpoint} is not valid JSON: {e}") from e

        # Errors are reported in-band with a 200 status
        if isinstance(payload, dict) and 'Error' in payload:
            raise ProviderError(f"Provider error for {endpoint}: {payload['Error']}")
        return payload
