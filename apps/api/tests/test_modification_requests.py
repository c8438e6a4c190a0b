"""Modification requests and attachment download."""
import ipaddress

import httpx
import pytest

from uniform_admin.core import url_validation
from uniform_admin.db.enums import NotificationType, RequestStatus, TaskHistoryAction, TaskStatus
from uniform_admin.db.models import DesignTask, DesignTaskHistory, Notification
from uniform_admin.services import modification_request_service, task_service
from uniform_admin.services.approval_service import (
    InvalidRequestError,
    PermissionDeniedError,
    RequestAlreadyProcessedError,
    TargetNotFoundError,
)

from helpers import seed_modification_request, seed_task


@pytest.mark.parametrize("status", list(TaskStatus))
def test_approve_moves_any_status_to_changes_requested(db, salesperson, test_user, status):
    task = seed_task(db, created_by=salesperson, status=status)
    request = seed_modification_request(db, salesperson, task, description="Bigger numbers")

    modification_request_service.approve(db, request.id, test_user.id)

    assert db.get(DesignTask, task.id).status == TaskStatus.CHANGES_REQUESTED.value
    history = db.query(DesignTaskHistory).filter(DesignTaskHistory.task_id == task.id).one()
    assert history.action == TaskHistoryAction.MODIFICATION_APPROVED.value
    assert history.old_status == status.value
    assert history.new_status == TaskStatus.CHANGES_REQUESTED.value
    assert "Bigger numbers" in history.notes


def test_approve_notifies_requester(db, salesperson, test_user, task):
    request = seed_modification_request(db, salesperson, task)

    modification_request_service.approve(db, request.id, test_user.id)

    notification = db.query(Notification).one()
    assert notification.type == NotificationType.MODIFICATION_APPROVED.value
    assert notification.task_id == task.id


def test_repeat_approval_is_refused(db, salesperson, test_user, task):
    request = seed_modification_request(db, salesperson, task)
    modification_request_service.approve(db, request.id, test_user.id)

    with pytest.raises(RequestAlreadyProcessedError):
        modification_request_service.approve(db, request.id, test_user.id)

    assert db.query(DesignTaskHistory).count() == 1


def test_reject_leaves_task_status(db, salesperson, test_user):
    task = seed_task(db, created_by=salesperson, status=TaskStatus.IN_PROGRESS)
    request = seed_modification_request(db, salesperson, task)

    resolved = modification_request_service.reject(db, request.id, test_user.id, "Design is final")

    assert resolved.status == RequestStatus.REJECTED.value
    assert db.get(DesignTask, task.id).status == TaskStatus.IN_PROGRESS.value
    assert db.query(Notification).one().type == NotificationType.MODIFICATION_REJECTED.value


def test_submit_cleans_attachments(db, salesperson, task):
    request = modification_request_service.submit_request(
        db,
        salesperson.id,
        task.id,
        "New crest",
        attachments=[
            {"name": " crest.png ", "url": "https://cdn.example.com/a/crest.png"},
            {"url": "https://cdn.example.com/b/sketch.pdf"},
        ],
    )

    assert request.attachments == [
        {"name": "crest.png", "url": "https://cdn.example.com/a/crest.png"},
        {"name": "sketch.pdf", "url": "https://cdn.example.com/b/sketch.pdf"},
    ]


def test_submit_needs_description(db, salesperson, task):
    with pytest.raises(InvalidRequestError):
        modification_request_service.submit_request(db, salesperson.id, task.id, " ")


def test_get_attachment_out_of_range(db, salesperson, task):
    request = seed_modification_request(
        db, salesperson, task, attachments=[{"name": "a.png", "url": "https://cdn.example.com/a.png"}]
    )

    assert modification_request_service.get_attachment(db, request.id, 0, can_review=True)["name"] == "a.png"
    with pytest.raises(TargetNotFoundError):
        modification_request_service.get_attachment(db, request.id, 1, can_review=True)


class TestFetchAttachment:
    attachment = {"name": "crest.png", "url": "https://cdn.example.com/crest.png"}

    @pytest.fixture(autouse=True)
    def public_dns(self, monkeypatch):
        def resolve(host, port):
            if host.endswith("example.com"):
                return {ipaddress.ip_address("93.184.216.34")}
            return {ipaddress.ip_address("10.0.0.7")}

        monkeypatch.setattr(url_validation, "_resolve_host", resolve)

    def test_fetch_returns_content(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert str(request.url) == "https://cdn.example.com/crest.png"
            return httpx.Response(200, content=b"\x89PNG", headers={"content-type": "image/png"})

        with httpx.Client(transport=httpx.MockTransport(handler)) as client:
            download = modification_request_service.fetch_attachment(self.attachment, client=client)

        assert download.fetched
        assert download.content == b"\x89PNG"
        assert download.content_type == "image/png"

    def test_fetch_failure_falls_back_to_url(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(403)

        with httpx.Client(transport=httpx.MockTransport(handler)) as client:
            download = modification_request_service.fetch_attachment(self.attachment, client=client)

        assert not download.fetched
        assert download.url == "https://cdn.example.com/crest.png"

    def test_connection_error_falls_back_to_url(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("unreachable", request=request)

        with httpx.Client(transport=httpx.MockTransport(handler)) as client:
            download = modification_request_service.fetch_attachment(self.attachment, client=client)

        assert not download.fetched

    def test_stored_internal_url_is_never_contacted(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError(f"unexpected fetch of {request.url}")

        with httpx.Client(transport=httpx.MockTransport(handler)) as client:
            download = modification_request_service.fetch_attachment(
                {"name": "meta", "url": "https://127.0.0.1/latest/meta-data"}, client=client
            )
            resolved_internal = modification_request_service.fetch_attachment(
                {"name": "x", "url": "https://files.corp.internal/x"}, client=client
            )

        assert not download.fetched
        assert not resolved_internal.fetched

    def test_redirect_to_internal_host_is_not_followed(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(302, headers={"location": "https://169.254.169.254/latest/meta-data"})

        with httpx.Client(transport=httpx.MockTransport(handler)) as client:
            download = modification_request_service.fetch_attachment(self.attachment, client=client)

        assert seen == ["https://cdn.example.com/crest.png"]
        assert not download.fetched
        assert download.url == "https://cdn.example.com/crest.png"

    def test_redirect_to_public_host_is_followed(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/crest.png":
                return httpx.Response(301, headers={"location": "/v2/crest.png"})
            return httpx.Response(200, content=b"v2", headers={"content-type": "image/png"})

        with httpx.Client(transport=httpx.MockTransport(handler)) as client:
            download = modification_request_service.fetch_attachment(self.attachment, client=client)

        assert download.content == b"v2"

    def test_oversized_body_is_not_buffered(self, monkeypatch):
        monkeypatch.setattr(modification_request_service.settings, "ATTACHMENT_MAX_BYTES", 8)

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"x" * 64, headers={"content-type": "image/png"})

        with httpx.Client(transport=httpx.MockTransport(handler)) as client:
            download = modification_request_service.fetch_attachment(self.attachment, client=client)

        assert not download.fetched


@pytest.mark.parametrize(
    "url",
    [
        "http://127.0.0.1:8080/latest/meta-data",
        "https://127.0.0.1/latest/meta-data",
        "https://192.168.0.10/share/file.png",
        "javascript:alert(1)",
        "ftp://cdn.example.com/file.png",
    ],
)
def test_submit_refuses_unsafe_attachment_urls(db, salesperson, task, url):
    with pytest.raises(InvalidRequestError):
        modification_request_service.submit_request(
            db, salesperson.id, task.id, "New crest", attachments=[{"name": "f", "url": url}]
        )


def test_only_reviewers_and_requester_read_attachments(db, salesperson, designer, task):
    request = seed_modification_request(
        db, salesperson, task, attachments=[{"name": "a.png", "url": "https://cdn.example.com/a.png"}]
    )

    assert modification_request_service.get_attachment(db, request.id, 0, user_id=salesperson.id)
    with pytest.raises(PermissionDeniedError):
        modification_request_service.get_attachment(db, request.id, 0, user_id=designer.id)


def test_stored_unsafe_url_is_refused_on_read(db, salesperson, task):
    request = seed_modification_request(
        db, salesperson, task, attachments=[{"name": "x", "url": "javascript:alert(1)"}]
    )

    with pytest.raises(InvalidRequestError):
        modification_request_service.get_attachment(db, request.id, 0, can_review=True)


def test_approve_on_deleted_task_names_the_deletion(db, salesperson, test_user, task):
    request = seed_modification_request(db, salesperson, task)
    task_service.soft_delete(db, task, test_user.id)
    db.commit()

    with pytest.raises(TargetNotFoundError, match="was deleted"):
        modification_request_service.approve(db, request.id, test_user.id)

    item = modification_request_service.enrich(db, [request])[0]
    assert item["task_deleted"] is True

    resolved = modification_request_service.reject(db, request.id, test_user.id, "Task is gone")
    assert resolved.status == RequestStatus.REJECTED.value
