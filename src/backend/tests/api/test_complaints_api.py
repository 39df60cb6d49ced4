"""
Tests for complaint API endpoints.
"""

import pytest
from httpx import AsyncClient

from models.cosmos_documents import ComplaintCategory, ComplaintStatus, NotificationType

FORM = {"title": "Road damage", "description": "Potholes on the bypass", "category": "infrastructure"}


@pytest.mark.unit
class TestSubmitComplaint:
    async def test_submit_with_three_attachments(
        self, client: AsyncClient, constituent_headers, notification_repo, attachment_storage
    ) -> None:
        files = [
            ("attachments", ("front.png", b"png-bytes", "image/png")),
            ("attachments", ("side.jpg", b"jpeg-bytes", "image/jpeg")),
            ("attachments", ("report.pdf", b"%PDF-1.4", "application/pdf")),
        ]

        response = await client.post("/api/v1/complaint", data=FORM, files=files, headers=constituent_headers)

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "pending"
        assert data["representative_id"] == "rep-a"
        assert [a["original_name"] for a in data["attachments"]] == ["front.png", "side.jpg", "report.pdf"]
        assert len(list((attachment_storage.base_dir / "complaints").iterdir())) == 3

        # Delivered by the background task after the response
        notifications = list(notification_repo.notifications.values())
        assert len(notifications) == 1
        assert notifications[0].recipient_id == "rep-a"
        assert notifications[0].type == NotificationType.NEW_COMPLAINT
        assert notifications[0].related_complaint_id == data["id"]

    async def test_too_many_attachments(self, client: AsyncClient, constituent_headers, complaint_repo) -> None:
        files = [("attachments", (f"{i}.png", b"x", "image/png")) for i in range(4)]

        response = await client.post("/api/v1/complaint", data=FORM, files=files, headers=constituent_headers)

        assert response.status_code == 400
        assert complaint_repo.complaints == {}

    async def test_disallowed_type(self, client: AsyncClient, constituent_headers) -> None:
        files = [("attachments", ("run.exe", b"MZ", "application/x-msdownload"))]

        response = await client.post("/api/v1/complaint", data=FORM, files=files, headers=constituent_headers)

        assert response.status_code == 400

    async def test_representative_cannot_submit(self, client: AsyncClient, representative_headers) -> None:
        response = await client.post("/api/v1/complaint", data=FORM, headers=representative_headers)

        assert response.status_code == 403

    async def test_requires_authentication(self, client: AsyncClient) -> None:
        response = await client.post("/api/v1/complaint", data=FORM)

        assert response.status_code == 401


@pytest.mark.unit
class TestListComplaints:
    async def test_representative_category_filter(
        self, client: AsyncClient, representative_headers, complaint_repo, complaint_factory
    ) -> None:
        complaint_repo.add(complaint_factory(title="School roof", category=ComplaintCategory.EDUCATION))
        complaint_repo.add(complaint_factory(title="Street light"))
        complaint_repo.add(
            complaint_factory(title="Other office", category=ComplaintCategory.EDUCATION, representative_id="rep-b")
        )

        response = await client.get(
            "/api/v1/complaint/representative",
            params={"category": "education"},
            headers=representative_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        assert data["complaints"][0]["title"] == "School roof"
        assert data["complaints"][0]["constituent"]["name"] == "Ali Khan"

    async def test_constituent_listing_pagination(
        self, client: AsyncClient, constituent_headers, complaint_repo, complaint_factory
    ) -> None:
        for i in range(3):
            complaint_repo.add(complaint_factory(title=f"Complaint {i}"))

        response = await client.get(
            "/api/v1/complaint/constituent", params={"page": 2, "limit": 2}, headers=constituent_headers
        )

        data = response.json()
        assert data["total"] == 3
        assert data["page"] == 2
        assert data["total_pages"] == 2
        assert len(data["complaints"]) == 1

    async def test_unknown_status_filter(self, client: AsyncClient, representative_headers) -> None:
        response = await client.get(
            "/api/v1/complaint/representative", params={"status": "closed"}, headers=representative_headers
        )

        assert response.status_code == 400

    async def test_constituent_cannot_use_representative_listing(
        self, client: AsyncClient, constituent_headers
    ) -> None:
        response = await client.get("/api/v1/complaint/representative", headers=constituent_headers)

        assert response.status_code == 403


@pytest.mark.unit
class TestUpdateComplaint:
    async def test_update_notifies_constituent(
        self, client: AsyncClient, representative_headers, complaint_repo, complaint_factory, notification_repo
    ) -> None:
        complaint = complaint_repo.add(complaint_factory())

        response = await client.put(
            f"/api/v1/complaint/{complaint.id}",
            json={"status": "in-progress", "response": "Team dispatched"},
            headers=representative_headers,
        )

        assert response.status_code == 200
        assert response.json()["status"] == "in-progress"
        assert response.json()["is_updated"] is True

        notifications = list(notification_repo.notifications.values())
        assert [n.recipient_id for n in notifications] == ["citizen-1"]
        assert notifications[0].type == NotificationType.COMPLAINT_STATUS_UPDATE

    async def test_other_representative_forbidden(
        self, client: AsyncClient, other_representative_headers, complaint_repo, complaint_factory
    ) -> None:
        complaint = complaint_repo.add(complaint_factory())

        response = await client.put(
            f"/api/v1/complaint/{complaint.id}",
            json={"status": "resolved"},
            headers=other_representative_headers,
        )

        assert response.status_code == 403
        assert complaint_repo.complaints[complaint.id].status == ComplaintStatus.PENDING.value

    async def test_resolved_complaint_is_final(
        self, client: AsyncClient, representative_headers, complaint_repo, complaint_factory
    ) -> None:
        complaint = complaint_repo.add(complaint_factory(status=ComplaintStatus.RESOLVED))

        response = await client.put(
            f"/api/v1/complaint/{complaint.id}",
            json={"response": "One more thing"},
            headers=representative_headers,
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "invalid_state"


@pytest.mark.unit
class TestComplaintDetail:
    async def test_get_by_constituent(
        self, client: AsyncClient, constituent_headers, complaint_repo, complaint_factory
    ) -> None:
        complaint = complaint_repo.add(complaint_factory())

        response = await client.get(f"/api/v1/complaint/{complaint.id}", headers=constituent_headers)

        assert response.status_code == 200
        assert response.json()["representative"]["name"] == "Sara Ahmed"
        assert response.json()["is_feedback_submitted"] is False

    async def test_unknown_complaint(self, client: AsyncClient, constituent_headers) -> None:
        response = await client.get("/api/v1/complaint/missing", headers=constituent_headers)

        assert response.status_code == 404

    async def test_pdf_export(
        self, client: AsyncClient, representative_headers, complaint_repo, complaint_factory
    ) -> None:
        complaint = complaint_repo.add(complaint_factory(response="Fixed"))

        response = await client.get(f"/api/v1/complaint/{complaint.id}/pdf", headers=representative_headers)

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert f"complaint-{complaint.id}.pdf" in response.headers["content-disposition"]
        assert response.content.startswith(b"%PDF")

    async def test_delete(self, client: AsyncClient, constituent_headers, complaint_repo, complaint_factory) -> None:
        complaint = complaint_repo.add(complaint_factory())

        response = await client.delete(f"/api/v1/complaint/{complaint.id}", headers=constituent_headers)

        assert response.status_code == 204
        assert complaint.id not in complaint_repo.complaints
