"""
Authentication routes: signup, login and the current seller.
"""

from typing import Optional

from fastapi import APIRouter, Depends

from shoplabel.api.dependencies import Services, get_current_seller, get_services
from shoplabel.api.schemas import CredentialsRequest, SellerIdentity, TokenResponse
from shoplabel.auth import hash_password, verify_password
from shoplabel.database.models import Seller
from shoplabel.utils.exceptions import AuthenticationError, ValidationError
from shoplabel.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter()


def _require_credentials(data: Optional[CredentialsRequest]) -> CredentialsRequest:
    if data is None or not data.email or not data.password:
        raise ValidationError("Missing email or password")
    return data


@router.post("/signup", response_model=TokenResponse)
def signup(
    data: Optional[CredentialsRequest] = None,
    services: Services = Depends(get_services),
):
    """
    Create a seller account and log it in.

    Duplicate emails are rejected with 400 and leave the store untouched.
    """
    data = _require_credentials(data)

    seller = services.store.create(data.email, hash_password(data.password))
    token = services.authenticator.issue_token(seller)

    logger.info(f"Seller {seller.id} signed up")
    return {"token": token, "user": seller.to_public_dict()}


@router.post("/login", response_model=TokenResponse)
def login(
    data: Optional[CredentialsRequest] = None,
    services: Services = Depends(get_services),
):
    data = _require_credentials(data)

    seller = services.store.find_by_email(data.email)
    if seller is None or not verify_password(data.password, seller.password_hash):
        logger.warning(f"Failed login for {data.email}")
        raise AuthenticationError("Invalid credentials")

    token = services.authenticator.issue_token(seller)
    return {"token": token, "user": seller.to_public_dict()}


@router.get("/me", response_model=SellerIdentity)
def me(seller: Seller = Depends(get_current_seller)):
    return seller.to_public_dict()
