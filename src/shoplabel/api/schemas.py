"""
Pydantic schemas for API request/response validation.

Request fields are optional on purpose: missing credentials are reported as
400 ``{"error": ...}`` by the routes instead of FastAPI's 422.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class CredentialsRequest(BaseModel):
    """Signup / login request."""
    email: Optional[str] = None
    password: Optional[str] = None


class SellerIdentity(BaseModel):
    id: int
    email: str


class TokenResponse(BaseModel):
    """Authentication token response."""
    token: str
    user: SellerIdentity


class SetupStatusResponse(BaseModel):
    id: int
    email: str
    tiktok_connected: bool
    packlink_connected: bool
    automation_enabled: bool


class SetupSaveRequest(BaseModel):
    """Carrier key and automation flag from the setup screen."""
    model_config = ConfigDict(populate_by_name=True)

    packlink_api_key: Optional[str] = Field(None, alias="packlinkApiKey")
    # Any truthy value enables automation
    automation_enabled: Optional[Any] = Field(None, alias="automationEnabled")


class SetupSaveResponse(BaseModel):
    message: str = "Saved"
    automation_enabled: bool
    packlink_connected: bool


class AutomationToggleResponse(BaseModel):
    automation_enabled: bool


class UrlResponse(BaseModel):
    url: str


class WebhookAck(BaseModel):
    received: bool = True
