import logging
import pytest
from unittest.mock import MagicMock
from urllib.parse import parse_qs, urlsplit

from pravis.tools.base import NavigationTarget, SessionContext, ToolRequest
from pravis.tools.dispatcher import IntentDispatcher
from pravis.tools.handlers import (
    CALENDAR_PATH,
    EMAIL_COMPOSE_PATH,
    handle_calendar,
    handle_email_compose,
)


@pytest.fixture
def dispatcher(registry):
    d = IntentDispatcher(registry)
    d.register("email_compose", handle_email_compose)
    d.register("calendar", handle_calendar)
    return d


@pytest.mark.parametrize("fields", [
    {},
    {"to": "alice@example.com"},
    {"subject": "Quarterly plan"},
    {"to": "alice@example.com", "body": "See attached."},
    {"to": "alice@example.com", "subject": "Hi", "body": "Hello Alice"},
])
def test_email_compose_only_present_params(dispatcher, ctx, navigator, fields):
    target = dispatcher.dispatch(ToolRequest(action="navigateToEmailCompose", params=fields), ctx)

    assert navigator.calls == [(EMAIL_COMPOSE_PATH, fields)]
    assert target.mode == "query"
    assert set(target.params) == set(fields)
    query = parse_qs(urlsplit(target.url).query)
    assert {k: v[0] for k, v in query.items()} == fields


def test_email_compose_url_encodes_values(dispatcher, ctx):
    target = dispatcher.dispatch(
        {"action": "navigateToEmailCompose", "params": {"to": "bob+team@example.com", "subject": "Q&A / plan?"}},
        ctx,
    )
    assert target.url == f"{EMAIL_COMPOSE_PATH}?to=bob%2Bteam%40example.com&subject=Q%26A+%2F+plan%3F"


def test_email_compose_no_params_has_bare_url(dispatcher, ctx):
    target = dispatcher.dispatch(ToolRequest(action="navigateToEmailCompose"), ctx)
    assert target.url == EMAIL_COMPOSE_PATH


def test_empty_values_are_omitted(dispatcher, ctx, navigator):
    dispatcher.dispatch(ToolRequest(action="navigateToEmailCompose", params={"to": "", "subject": "Hi"}), ctx)
    assert navigator.calls == [(EMAIL_COMPOSE_PATH, {"subject": "Hi"})]


def test_calendar_prefill_travels_as_state(dispatcher, ctx, navigator):
    req = ToolRequest(action="navigateToCalendar", params={"date": "2024-07-29", "summary": "Dentist"})
    target = dispatcher.dispatch(req, ctx)

    assert navigator.calls == [(CALENDAR_PATH, {"date": "2024-07-29", "summary": "Dentist"})]
    assert "startTime" not in target.params
    assert target.mode == "state"
    # Prefill travels as state, not in the URL
    assert target.url == CALENDAR_PATH


def test_unknown_action_is_logged_and_ignored(dispatcher, ctx, navigator, caplog):
    with caplog.at_level(logging.WARNING, logger="pravis.tools.dispatcher"):
        target = dispatcher.dispatch({"action": "navigateToSettings", "params": {}}, ctx)

    assert target is None
    assert navigator.calls == []
    assert "Unhandled intent action: navigateToSettings" in caplog.text


def test_unregistered_handler_is_ignored(registry, ctx, navigator):
    d = IntentDispatcher(registry)
    assert d.dispatch(ToolRequest(action="navigateToCalendar"), ctx) is None
    assert navigator.calls == []


def test_unexpected_param_is_ignored(dispatcher, ctx, navigator):
    assert dispatcher.dispatch({"action": "navigateToCalendar", "params": {"room": "B2"}}, ctx) is None
    assert navigator.calls == []


def test_invalid_params_rejected_before_handler(registry, ctx, navigator, caplog):
    handler = MagicMock()
    d = IntentDispatcher(registry)
    d.register("calendar", handler)

    with caplog.at_level(logging.WARNING, logger="pravis.tools.dispatcher"):
        target = d.dispatch({"action": "navigateToCalendar", "params": {"date": "next friday"}}, ctx)

    assert target is None
    handler.assert_not_called()
    assert navigator.calls == []
    assert "invalid params ['date']" in caplog.text


def test_handler_type_error_is_a_navigation_failure(registry, ctx, navigator, caplog):
    def broken_handler(ctx, **fields):
        return len(None)

    d = IntentDispatcher(registry)
    d.register("calendar", broken_handler)

    with caplog.at_level(logging.ERROR, logger="pravis.tools.dispatcher"):
        target = d.dispatch(ToolRequest(action="navigateToCalendar", params={"summary": "Gym"}), ctx)

    assert target is None
    assert navigator.calls == []
    assert ctx.pending_intent is None
    assert "Navigation for 'navigateToCalendar' failed" in caplog.text
    assert "invalid params" not in caplog.text


def test_pending_intent_is_one_shot(dispatcher):
    seen = []

    class SpyNavigator:
        def navigate(self, path, params):
            seen.append(ctx.pending_intent)

    ctx = SessionContext(navigator=SpyNavigator())
    dispatcher.dispatch(ToolRequest(action="navigateToCalendar", params={"summary": "Gym"}), ctx)

    assert seen == [ToolRequest(action="navigateToCalendar", params={"summary": "Gym"})]
    assert ctx.pending_intent is None


def test_navigation_failure_does_not_escape(dispatcher):
    nav = MagicMock()
    nav.navigate.side_effect = RuntimeError("router unavailable")
    ctx = SessionContext(navigator=nav)

    assert dispatcher.dispatch(ToolRequest(action="navigateToEmailCompose", params={"to": "a@b.co"}), ctx) is None
    assert ctx.pending_intent is None


def test_navigation_target_to_dict():
    t = NavigationTarget(path="/x", params={"a": "1 2"}, mode="query")
    assert t.to_dict() == {"path": "/x", "params": {"a": "1 2"}, "url": "/x?a=1+2", "mode": "query"}
