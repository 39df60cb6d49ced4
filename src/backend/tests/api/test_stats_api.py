"""
Tests for the complaint statistics endpoint.
"""

from datetime import datetime, timezone

import pytest
from httpx import AsyncClient

from models.cosmos_documents import ComplaintCategory, ComplaintStatus


@pytest.mark.unit
class TestStatsEndpoint:
    async def test_representative_stats(
        self, client: AsyncClient, representative_headers, complaint_repo, complaint_factory
    ) -> None:
        complaint_repo.add(complaint_factory())
        complaint_repo.add(complaint_factory(status=ComplaintStatus.RESOLVED))
        complaint_repo.add(complaint_factory(representative_id="rep-b"))

        response = await client.get("/api/v1/stats/complaints", headers=representative_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 2
        assert data["pending"] == 1
        assert data["resolved"] == 1
        assert data["new"] == 2

    async def test_requires_authentication(self, client: AsyncClient) -> None:
        response = await client.get("/api/v1/stats/complaints")

        assert response.status_code == 401

    async def test_trends(self, client: AsyncClient, representative_headers, complaint_repo, complaint_factory) -> None:
        complaint_repo.add(complaint_factory(created_at=datetime(2024, 3, 5, tzinfo=timezone.utc)))
        complaint_repo.add(
            complaint_factory(status=ComplaintStatus.IN_PROGRESS, created_at=datetime(2024, 3, 20, tzinfo=timezone.utc))
        )
        complaint_repo.add(complaint_factory(created_at=datetime(2024, 6, 1, tzinfo=timezone.utc)))

        response = await client.get(
            "/api/v1/stats/complaints/trends", params={"period": "year"}, headers=representative_headers
        )

        assert response.status_code == 200
        data = response.json()
        assert data["period"] == "year"
        assert data["points"] == [
            {"label": "2024", "total": 3, "pending": 2, "in_progress": 1, "resolved": 0, "rejected": 0}
        ]

    async def test_trends_rejects_unknown_period(self, client: AsyncClient, representative_headers) -> None:
        response = await client.get(
            "/api/v1/stats/complaints/trends", params={"period": "decade"}, headers=representative_headers
        )

        assert response.status_code == 400

    async def test_categories(
        self, client: AsyncClient, constituent_headers, complaint_repo, complaint_factory
    ) -> None:
        complaint_repo.add(complaint_factory(category=ComplaintCategory.HEALTHCARE))
        complaint_repo.add(complaint_factory(category=ComplaintCategory.HEALTHCARE))
        complaint_repo.add(complaint_factory())

        response = await client.get("/api/v1/stats/complaints/categories", headers=constituent_headers)

        assert response.status_code == 200
        assert response.json() == {
            "categories": [
                {"category": "healthcare", "count": 2},
                {"category": "infrastructure", "count": 1},
            ],
            "total": 3,
        }
