"""
Client for the Megapot REST data API.

The data API is supplementary: every failure is reported inside the
ApiResponse envelope instead of being raised, so callers can show partial
data without wrapping each call.
"""
import logging
from typing import Any, List, Optional

import requests
from pydantic import ValidationError
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .config import DataApiConfig
from .models import ApiResponse, PoolInfo, PoolStats

logger = logging.getLogger(__name__)


class DataApiClient:
    """Pool and user data served over HTTP"""

    def __init__(
        self,
        config: DataApiConfig,
        retry_count: int = 3,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize the data API client

        Args:
            config: Base URL, optional API key and timeout
            retry_count: Number of HTTP retries for server errors
            session: Optional HTTP session (one is created otherwise)
        """
        self.config = config
        self.timeout = config.timeout
        if session is None:
            session = requests.Session()
            retries = Retry(
                total=retry_count,
                backoff_factor=0.5,
                status_forcelist=[500, 502, 503, 504],
                allowed_methods=["GET"],
                raise_on_status=False,
                connect=retry_count,
                read=retry_count
            )
            session.mount("http://", HTTPAdapter(max_retries=retries))
            session.mount("https://", HTTPAdapter(max_retries=retries))
        self.session = session
        self.session.headers.update({"Content-Type": "application/json"})
        if config.api_key:
            self.session.headers["Authorization"] = f"Bearer {config.api_key}"

    def _get(
        self,
        path: str,
        model: Any,
        params: Optional[dict] = None,
        empty: Any = None
    ) -> ApiResponse:
        url = f"{self.config.base_url}{path}"
        logger.debug(f"GET {url} params={params}")
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            return ApiResponse[model].model_validate(response.json())
        except requests.RequestException as e:
            logger.error(f"Data API request to {path} failed: {e}")
            return ApiResponse[model](success=False, error=str(e), data=empty)
        except ValidationError as e:
            logger.error(f"Malformed data API response from {path}: {e}")
            return ApiResponse[model](success=False, error="Malformed response", data=empty)
        except ValueError as e:
            logger.error(f"Invalid JSON from data API {path}: {e}")
            return ApiResponse[model](success=False, error=f"Invalid JSON: {e}", data=empty)

    def get_pool_info(self, pool_id: str) -> ApiResponse[PoolInfo]:
        return self._get(f"/pools/{pool_id}", PoolInfo)

    def get_pool_stats(self) -> ApiResponse[PoolStats]:
        return self._get("/pools/stats", PoolStats)

    def get_user_pools(self, user_address: str) -> ApiResponse[List[PoolInfo]]:
        return self._get(f"/users/{user_address}/pools", List[PoolInfo], empty=[])

    def get_active_pools(self, limit: int = 20) -> ApiResponse[List[PoolInfo]]:
        """Active pools, newest first as served by the API"""
        return self._get("/pools/active", List[PoolInfo], params={"limit": limit}, empty=[])
