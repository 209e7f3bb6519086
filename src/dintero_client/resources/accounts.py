"""Accounts API."""

from typing import Any, Optional

from .base import BaseResource, ResponseModel


class AccountsResource(BaseResource):
    """Account details, payment profiles and the current auth session."""

    async def get_account(self, *, response_model: ResponseModel = None) -> Any:
        return await self._get(self._path(), response_model=response_model)

    async def update_account(self, changes: Any, *, response_model: ResponseModel = None) -> Any:
        return await self._put(self._path(), changes, response_model=response_model)

    async def list_profiles(self, *, page_token: Optional[str] = None,
                            response_model: ResponseModel = None) -> Any:
        params = {"page_token": page_token} if page_token else None
        return await self._get(self._path("profiles"), params=params,
                               response_model=response_model)

    async def get_profile(self, profile_id: str, *, response_model: ResponseModel = None) -> Any:
        return await self._get(self._path("profiles", profile_id), response_model=response_model)

    async def get_session(self, *, response_model: ResponseModel = None) -> Any:
        """Session of the credentials in use (not bound to the account path)."""
        return await self._get("accounts/session", response_model=response_model)
