"""Pytest configuration and fixtures."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest
from fastapi.testclient import TestClient

from receiptpoints.core.config import Settings, get_settings
from receiptpoints.main import create_app
from receiptpoints.models import Receipt
from receiptpoints.services.receipt_store import ReceiptStore

if TYPE_CHECKING:
    from collections.abc import Generator

    from fastapi import FastAPI


@pytest.fixture
def test_settings() -> Settings:
    """Create test settings."""
    return Settings(
        debug=True,
        log_level="DEBUG",
        reject_invalid_receipts=True,
    )


@pytest.fixture
def app(test_settings: Settings) -> FastAPI:
    """Create test FastAPI app."""
    app = create_app()
    app.dependency_overrides[get_settings] = lambda: test_settings
    return app


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    """Create test client."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def target_receipt_data() -> dict[str, Any]:
    """Canonical Target receipt, worth 28 points."""
    return {
        "retailer": "Target",
        "purchaseDate": "2022-01-01",
        "purchaseTime": "13:01",
        "items": [
            {"shortDescription": "Mountain Dew 12PK", "price": "6.49"},
            {"shortDescription": "Emils Cheese Pizza", "price": "12.25"},
            {"shortDescription": "Knorr Creamy Chicken", "price": "1.26"},
            {"shortDescription": "Doritos Nacho Cheese", "price": "3.35"},
            {"shortDescription": "   Klarbrunn 12-PK 12 FL OZ  ", "price": "12.00"},
        ],
        "total": "35.35",
    }


@pytest.fixture
def mm_receipt_data() -> dict[str, Any]:
    """Canonical M&M Corner Market receipt, worth 109 points."""
    return {
        "retailer": "M&M Corner Market",
        "purchaseDate": "2022-03-20",
        "purchaseTime": "14:33",
        "items": [
            {"shortDescription": "Gatorade", "price": "2.25"},
            {"shortDescription": "Gatorade", "price": "2.25"},
            {"shortDescription": "Gatorade", "price": "2.25"},
            {"shortDescription": "Gatorade", "price": "2.25"},
        ],
        "total": "9.00",
    }


@pytest.fixture
def zero_point_receipt_data() -> dict[str, Any]:
    """Receipt that earns no points under any rule."""
    return {
        "retailer": "&",
        "purchaseDate": "2022-03-20",
        "purchaseTime": "13:00",
        "items": [{"shortDescription": "ab", "price": "1.10"}],
        "total": "1.10",
    }


@pytest.fixture
def target_receipt(target_receipt_data: dict[str, Any]) -> Receipt:
    """Canonical Target receipt model."""
    return Receipt.model_validate(target_receipt_data)


@pytest.fixture
def mm_receipt(mm_receipt_data: dict[str, Any]) -> Receipt:
    """Canonical M&M Corner Market receipt model."""
    return Receipt.model_validate(mm_receipt_data)


@pytest.fixture
def receipt_store() -> ReceiptStore:
    """Create an empty receipt store."""
    return ReceiptStore()
