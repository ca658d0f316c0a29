"""
Unit tests for bearer token authentication
"""
from datetime import datetime, timedelta, timezone

import pytest

from shoplabel.auth import SessionAuthenticator
from shoplabel.utils.exceptions import AuthenticationError


@pytest.fixture
def authenticator(store, jwt_manager):
    return SessionAuthenticator(store, jwt_manager)


class TestSessionAuthenticator:

    def test_valid_token_resolves_seller(self, authenticator, seller):
        token = authenticator.issue_token(seller)

        assert authenticator.authenticate(token).id == seller.id

    def test_valid_header_resolves_seller(self, authenticator, seller):
        token = authenticator.issue_token(seller)

        assert authenticator.authenticate_header(f"Bearer {token}").email == seller.email

    @pytest.mark.parametrize("header", [None, "", "Bearer", "Bearer ", "Bearer garbage"])
    def test_missing_or_malformed_header(self, authenticator, seller, header):
        with pytest.raises(AuthenticationError) as exc_info:
            authenticator.authenticate_header(header)

        assert exc_info.value.message == "Unauthorized"

    def test_expired_token(self, authenticator, jwt_manager, seller):
        issued = datetime.now(timezone.utc) - timedelta(days=8)
        token = jwt_manager.create_access_token(seller.id, seller.email, now=issued)

        with pytest.raises(AuthenticationError):
            authenticator.authenticate(token)

    def test_token_for_deleted_seller(self, authenticator, jwt_manager):
        token = jwt_manager.create_access_token(999, "gone@example.com")

        with pytest.raises(AuthenticationError):
            authenticator.authenticate(token)

    def test_all_failures_share_one_message(self, authenticator, jwt_manager, seller):
        expired = jwt_manager.create_access_token(
            seller.id, seller.email, now=datetime.now(timezone.utc) - timedelta(days=8)
        )
        messages = set()
        for token in (None, "garbage", expired):
            with pytest.raises(AuthenticationError) as exc_info:
                authenticator.authenticate(token)
            messages.add(str(exc_info.value))

        assert messages == {"Unauthorized"}
