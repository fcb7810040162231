"""Integration test fixtures for the HTTP API."""

from collections.abc import AsyncGenerator
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from labour_cost.api.app import create_app


@pytest_asyncio.fixture(scope="function")
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Get async HTTP client for API tests."""
    app = create_app()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def staff_cost_body() -> dict[str, Any]:
    """March 2024 time entries for an employee and a salaried manager."""
    return {
        "config": {
            "break_calculation_mode": "PER_SHIFT",
            "break_rules": '[{"minHours": 6, "breakMinutes": 30}]',
        },
        "staff": [
            {"user_id": "alice", "name": "Alice", "role": "EMPLOYEE"},
            {
                "user_id": "carol",
                "name": "Carol",
                "role": "MANAGER",
                "payment_type": "MONTHLY",
                "monthly_salary": "2000",
            },
        ],
        "categories": [
            {"category_id": "kitchen", "name": "Kitchen", "default_hourly_rate": "15.00"},
        ],
        "locations": [
            {"location_id": "loc-a", "name": "High Street"},
        ],
        "time_entries": [
            {
                "entry_id": "te-1",
                "user_id": "alice",
                "clock_in": "2024-03-04T09:00:00Z",
                "clock_out": "2024-03-04T17:00:00Z",
                "category_id": "kitchen",
                "location_id": "loc-a",
            },
            {
                "entry_id": "te-open",
                "user_id": "alice",
                "clock_in": "2024-03-05T09:00:00Z",
                "clock_out": None,
                "category_id": "kitchen",
            },
        ],
    }


@pytest.fixture
def forecast_body() -> dict[str, Any]:
    """A 40 hour contract against five 7 hour shifts."""
    return {
        "staff": [
            {
                "user_id": "eve",
                "name": "Eve",
                "contracted_hours": "40",
                "location_ids": ["loc-a"],
            },
        ],
        "categories": [
            {"category_id": "floor", "name": "Floor", "default_hourly_rate": "10"},
        ],
        "shifts": [
            {
                "shift_id": f"s{day}",
                "start_time": f"2024-03-0{day}T09:00:00Z",
                "end_time": f"2024-03-0{day}T16:00:00Z",
                "assigned_to_id": "eve",
                "category_id": "floor",
                "location_id": "loc-a",
            }
            for day in range(4, 9)
        ],
    }
