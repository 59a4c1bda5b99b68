"""
HTTP client for the campaign API, used by views that poll for fresh data.

Each call is a single attempt: failures are raised as the same error types
the server uses, and the caller decides what to show.
"""
import logging
from typing import Any, Dict, List, Optional

import httpx

from . import config, errors

logger = logging.getLogger(__name__)


class CampaignClient:

    def __init__(self, base_url: str = None, timeout: float = None, http: Optional[httpx.AsyncClient] = None):
        self.base_url = base_url or config.client_base_url()
        self.http = http or httpx.AsyncClient(base_url=self.base_url, timeout=timeout or config.client_timeout())

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        await self.aclose()

    async def aclose(self):
        await self.http.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            resp = await self.http.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise errors.StoreError(f"Request to {path} failed: {e}") from e

        if resp.status_code < 400:
            if resp.headers.get('content-type', '').startswith('application/json'):
                return resp.json()
            return resp.text

        try:
            body = resp.json()
        except ValueError:
            body = {}
        detail = body.get('detail') if isinstance(body, dict) else None
        detail = detail if isinstance(detail, str) else resp.reason_phrase
        if resp.status_code == 400:
            raise errors.ValidationError(detail, body.get('errors', []))
        if resp.status_code == 404:
            raise errors.NotFoundError(detail)
        if resp.status_code == 409:
            raise errors.ConflictError(detail)
        raise errors.StoreError(f"{resp.status_code}: {detail}")

    # public site

    async def get_donations(self) -> List[Dict[str, Any]]:
        return await self._request('GET', '/api/donations')

    async def create_donation(self, donation: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request('POST', '/api/donations', json=donation)

    async def get_stats(self) -> Dict[str, Any]:
        return await self._request('GET', '/api/donations/stats')

    async def get_campaign(self) -> Dict[str, Any]:
        return await self._request('GET', '/api/campaign')

    async def get_progress(self) -> Dict[str, Any]:
        return await self._request('GET', '/api/campaign/progress')

    async def subscribe(self, email: str) -> Dict[str, Any]:
        return await self._request('POST', '/api/newsletter/subscribe', json={'email': email})

    # admin dashboard

    async def get_admin_donations(self, **params) -> List[Dict[str, Any]]:
        """params: sortBy, order, anonymity, search"""
        params = {k: v for k, v in params.items() if v is not None}
        return await self._request('GET', '/api/admin/donations', params=params)

    async def add_donation(self, donation: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request('POST', '/api/admin/donations', json=donation)

    async def export_donations_csv(self, **params) -> str:
        params = {k: v for k, v in params.items() if v is not None}
        return await self._request('GET', '/api/admin/donations/export', params=params)

    async def get_admin_stats(self) -> Dict[str, Any]:
        return await self._request('GET', '/api/admin/stats')

    async def update_campaign(self, settings: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request('PUT', '/api/admin/campaign', json=settings)
