"""
Seller setup routes: connection status, Packlink key and automation flag.
"""

from typing import Optional

from fastapi import APIRouter, Depends

from shoplabel.api.dependencies import Services, get_current_seller, get_services
from shoplabel.api.schemas import (
    AutomationToggleResponse,
    SetupSaveRequest,
    SetupSaveResponse,
    SetupStatusResponse,
)
from shoplabel.database.models import Seller
from shoplabel.utils.exceptions import SellerNotFoundError
from shoplabel.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.get("/setup/status", response_model=SetupStatusResponse)
def setup_status(seller: Seller = Depends(get_current_seller)):
    return {
        "id": seller.id,
        "email": seller.email,
        "tiktok_connected": seller.tiktok_connected,
        "packlink_connected": seller.packlink_connected,
        "automation_enabled": bool(seller.automation_enabled),
    }


@router.post("/setup/save", response_model=SetupSaveResponse)
def setup_save(
    data: Optional[SetupSaveRequest] = None,
    seller: Seller = Depends(get_current_seller),
    services: Services = Depends(get_services),
):
    """
    Store the Packlink API key and automation flag.

    An empty key clears the stored one.
    """
    data = data or SetupSaveRequest()

    updated = services.store.update(
        seller.id,
        packlink_api_key=data.packlink_api_key or None,
        automation_enabled=bool(data.automation_enabled),
    )
    if updated is None:
        raise SellerNotFoundError()

    logger.info(f"Setup saved for seller {seller.id} (automation={updated.automation_enabled})")
    return {
        "message": "Saved",
        "automation_enabled": updated.automation_enabled,
        "packlink_connected": updated.packlink_connected,
    }


@router.post("/automation/toggle", response_model=AutomationToggleResponse)
def toggle_automation(
    seller: Seller = Depends(get_current_seller),
    services: Services = Depends(get_services),
):
    updated = services.store.update(seller.id, automation_enabled=not seller.automation_enabled)
    if updated is None:
        raise SellerNotFoundError()

    logger.info(f"Automation for seller {seller.id} set to {updated.automation_enabled}")
    return {"automation_enabled": updated.automation_enabled}
