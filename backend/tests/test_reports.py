"""
Tests for moderation reports and the admin review queue.
"""

import pytest
from httpx import AsyncClient
from sqlalchemy import select, func

from eventhive.core.exceptions import ValidationError
from eventhive.models import Report
from eventhive.schemas.report import ReportCreate
from eventhive.services.report_service import submit_report


async def _report_count(db) -> int:
    return (await db.execute(select(func.count(Report.id)))).scalar()


@pytest.mark.asyncio
async def test_report_with_both_targets_rejected(db_session, test_user, other_user, test_facility):
    data = ReportCreate(
        report_type="OTHER",
        reason="Two birds",
        target_user_id=other_user.id,
        target_facility_id=test_facility.id,
    )
    with pytest.raises(ValidationError, match="exactly one"):
        await submit_report(db_session, test_user, data)
    assert await _report_count(db_session) == 0


@pytest.mark.asyncio
async def test_report_with_no_target_rejected(client: AsyncClient, db_session, auth_headers):
    response = await client.post(
        "/api/reports", json={"report_type": "SPAM", "reason": "Nobody in particular"}, headers=auth_headers
    )
    assert response.status_code == 400
    assert response.json()["code"] == "validation"
    assert await _report_count(db_session) == 0


@pytest.mark.asyncio
async def test_report_user(client: AsyncClient, auth_headers, test_user, other_user):
    response = await client.post(
        "/api/reports",
        json={
            "report_type": "INAPPROPRIATE_BEHAVIOR",
            "reason": "Abusive language",
            "description": "During the Sunday match",
            "evidence": ["/uploads/abc.png"],
            "target_user_id": other_user.id,
        },
        headers=auth_headers,
    )
    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "PENDING"
    assert data["reporter_id"] == test_user.id
    assert data["target_user_id"] == other_user.id
    assert data["target_facility_id"] is None
    assert data["evidence"] == ["/uploads/abc.png"]


@pytest.mark.asyncio
async def test_report_facility(client: AsyncClient, auth_headers, test_facility):
    response = await client.post(
        "/api/reports",
        json={"report_type": "FACILITY_ISSUE", "reason": "Broken nets", "target_facility_id": test_facility.id},
        headers=auth_headers,
    )
    assert response.status_code == 201
    assert response.json()["target_facility_id"] == test_facility.id


@pytest.mark.asyncio
async def test_report_self_rejected(client: AsyncClient, auth_headers, test_user):
    response = await client.post(
        "/api/reports",
        json={"report_type": "OTHER", "reason": "Me", "target_user_id": test_user.id},
        headers=auth_headers,
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_report_missing_target(client: AsyncClient, auth_headers):
    response = await client.post(
        "/api/reports",
        json={"report_type": "FRAUD", "reason": "Ghost", "target_facility_id": 999},
        headers=auth_headers,
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_admin_review_flow(client: AsyncClient, auth_headers, admin_headers, admin, other_user, test_facility):
    first = (await client.post(
        "/api/reports",
        json={"report_type": "SPAM", "reason": "Ads in chat", "target_user_id": other_user.id},
        headers=auth_headers,
    )).json()
    await client.post(
        "/api/reports",
        json={"report_type": "FACILITY_ISSUE", "reason": "No lights", "target_facility_id": test_facility.id},
        headers=auth_headers,
    )

    assert (await client.get("/api/admin/reports", headers=auth_headers)).status_code == 403

    queue = (await client.get("/api/admin/reports", headers=admin_headers)).json()
    assert queue["total"] == 2
    assert len(queue["reports"]) == 2

    resolved = await client.patch(
        f"/api/admin/reports/{first['id']}",
        json={"status": "RESOLVED", "review_notes": "Warned the user", "action_taken": "warning"},
        headers=admin_headers,
    )
    assert resolved.status_code == 200
    data = resolved.json()
    assert data["status"] == "RESOLVED"
    assert data["reviewed_by_id"] == admin.id
    assert data["reviewed_at"] is not None
    assert data["action_taken"] == "warning"

    # Status is free-form: a resolved report may be reopened
    reopened = await client.patch(
        f"/api/admin/reports/{first['id']}", json={"status": "PENDING"}, headers=admin_headers
    )
    assert reopened.json()["status"] == "PENDING"
    assert reopened.json()["review_notes"] == "Warned the user"

    pending = (await client.get("/api/admin/reports?status=PENDING", headers=admin_headers)).json()
    assert pending["total"] == 2

    stats = (await client.get("/api/admin/reports/stats", headers=admin_headers)).json()
    assert stats["total"] == 2
    assert stats["by_status"] == {"PENDING": 2, "UNDER_REVIEW": 0, "RESOLVED": 0, "DISMISSED": 0}
    assert stats["by_type"] == {"SPAM": 1, "FACILITY_ISSUE": 1}

    deleted = await client.delete(f"/api/admin/reports/{first['id']}", headers=admin_headers)
    assert deleted.status_code == 200
    assert (await client.get("/api/admin/reports", headers=admin_headers)).json()["total"] == 1
