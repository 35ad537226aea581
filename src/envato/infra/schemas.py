from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class TokenPayload(BaseModel):
	"""Response of the OAuth token endpoint"""
	model_config = ConfigDict(extra="ignore")

	token_type: str
	access_token: str
	expires_in: int
	refresh_token: Optional[str] = None


class OAuthErrorPayload(BaseModel):
	"""Error body returned by the OAuth token endpoint"""
	model_config = ConfigDict(extra="ignore")

	error: Optional[str] = None
	error_description: Optional[str] = None


class IdentityPayload(BaseModel):
	"""Response of /whoami"""
	model_config = ConfigDict(extra="ignore", populate_by_name=True)

	client_id: Optional[str] = Field(None, alias="clientId")
	user_id: int = Field(alias="userId")
	scopes: list[str] = Field(default_factory=list)
	ttl: int = 0
