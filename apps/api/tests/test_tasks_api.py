"""Task endpoints, including designer returns."""
import pytest
from httpx import AsyncClient

from helpers import seed_task


@pytest.mark.asyncio
async def test_list_and_detail(authed_client: AsyncClient, task):
    listing = await authed_client.get("/tasks")
    detail = await authed_client.get(f"/tasks/{task.id}")

    assert listing.status_code == 200
    assert listing.json()["total"] == 1
    assert detail.status_code == 200
    assert detail.json()["id"] == str(task.id)
    assert detail.json()["history"] == []


@pytest.mark.asyncio
async def test_designer_moves_task(designer_client: AsyncClient, task):
    response = await designer_client.patch(f"/tasks/{task.id}/status", json={"status": "in_progress"})

    assert response.status_code == 200
    assert response.json()["status"] == "in_progress"


@pytest.mark.asyncio
async def test_salesperson_cannot_move_task(salesperson_client: AsyncClient, task):
    response = await salesperson_client.patch(f"/tasks/{task.id}/status", json={"status": "completed"})
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_return_and_resend_round_trip(
    designer_client: AsyncClient, salesperson_client: AsyncClient, task
):
    returned = await designer_client.post(
        f"/tasks/{task.id}/designer-rejection",
        json={"reason_type": "missing_logo", "reason_text": "Send vector file"},
    )
    assert returned.status_code == 201
    assert returned.json()["reason_type"] == "missing_logo"

    listing = await salesperson_client.get("/tasks/returned")
    assert listing.status_code == 200
    items = listing.json()
    assert len(items) == 1
    assert items[0]["customer_name"] == "Acme FC"
    assert items[0]["reason_label"] == "Logo missing or incomplete"

    resent = await salesperson_client.post(f"/tasks/{task.id}/resend")
    assert resent.status_code == 200
    assert resent.json()["returned_from_rejection"] is True
    assert (await salesperson_client.get("/tasks/returned")).json() == []


@pytest.mark.asyncio
async def test_other_reason_without_text_is_422(designer_client: AsyncClient, task):
    response = await designer_client.post(
        f"/tasks/{task.id}/designer-rejection", json={"reason_type": "other"}
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_resend_someone_elses_task_is_403(
    designer_client: AsyncClient, salesperson_client: AsyncClient, db, test_user
):
    task = seed_task(db, created_by=test_user)
    await designer_client.post(
        f"/tasks/{task.id}/designer-rejection", json={"reason_type": "missing_info"}
    )

    response = await salesperson_client.post(f"/tasks/{task.id}/resend")
    assert response.status_code == 403
