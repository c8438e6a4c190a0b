from uniform_admin.core.structured_logging import build_log_context


def test_build_log_context_drops_empty_values():
    context = build_log_context(user_id="u1", request_id=None, route="/approvals/delete", method="")
    assert context == {"user_id": "u1", "route": "/approvals/delete"}


def test_build_log_context_includes_request_kind_and_entity():
    context = build_log_context(request_kind="priority-change", entity_id="abc")
    assert context == {"request_kind": "priority-change", "entity_id": "abc"}
