"""Tests for shared API helpers."""

from decimal import Decimal

import pytest
from fastapi import HTTPException

from api.helpers import (
    account_response_dict,
    get_or_404,
    item_response_dict,
    liability_response_dict,
)
from models import Account, Item, Liability


class TestGetOr404:
    def test_returns_entity(self, db, account):
        result = get_or_404(db, Account, account.id, "Account not found")
        assert result.id == account.id

    def test_raises_404_when_missing(self, db):
        with pytest.raises(HTTPException) as exc_info:
            get_or_404(db, Account, "nonexistent-id", "Account not found")
        assert exc_info.value.status_code == 404
        assert exc_info.value.detail == "Account not found"

    def test_default_detail(self, db):
        with pytest.raises(HTTPException) as exc_info:
            get_or_404(db, Item, "missing")
        assert exc_info.value.detail == "Not found"


class TestResponseDicts:
    def test_account_dict_takes_institution_from_item(self, account):
        result = account_response_dict(account)

        assert result["institution_name"] == "First Platypus Bank"
        assert result["current_balance"] == Decimal("1000.00")
        assert result["item_id"] == "item-1"

    def test_account_dict_explicit_institution_wins(self, account):
        assert account_response_dict(account, "Override")["institution_name"] == "Override"

    def test_item_dict_omits_access_token(self, item, account):
        result = item_response_dict(item)

        assert "access_token" not in result
        assert [a["id"] for a in result["accounts"]] == [account.id]

    def test_liability_dict_flattens_account(self, db, credit_account):
        liability = Liability(account_id=credit_account.id, type="credit", apr=Decimal("19.99"))
        db.add(liability)
        db.commit()

        result = liability_response_dict(liability)

        assert result["apr"] == Decimal("19.99")
        assert result["account_name"] == "Plaid Credit Card"
        assert result["credit_limit"] == Decimal("2000.00")
        assert result["institution_name"] == "First Platypus Bank"
