import pytest

from src.agents import nodes
from src.agents.conversation import (
    TRANSITION_NOTICE,
    SlotFillingConversation,
    render_transcript,
)
from src.models.errors import (
    ConfigurationError,
    ConversationClosedError,
    InvalidDateError,
    NetworkError,
)
from src.models.schemas import ConversationStatus, ConverseReply
from src.services.session_service import SessionService
from src.utils.transaction_log import CONVERSATION_CHANNEL, DIRECT_CHANNEL, transaction_logs

from conftest import FakeExtraction, FakeSearch


def ask(reply, missing=None):
    return ConverseReply(reply=reply, is_complete=False, missing=missing or [])


def done(fields):
    return ConverseReply(reply="", is_complete=True, fields=fields)


@pytest.fixture
def session():
    return SessionService().create_session()


def use_collaborators(monkeypatch, extraction, search):
    monkeypatch.setattr(nodes, "extraction_service", extraction)
    monkeypatch.setattr(nodes, "search_service", search)


def test_clarifying_turn_keeps_conversation_open(monkeypatch, session):
    extraction = FakeExtraction([ask("Where are you flying from?", ["departure city"])])
    search = FakeSearch()
    use_collaborators(monkeypatch, extraction, search)

    outcome = SlotFillingConversation(session).handle_turn("Flights to Chennai")

    assert outcome.replies == ["Where are you flying from?"]
    assert outcome.status == ConversationStatus.INCOMPLETE
    assert outcome.result is None
    assert search.queries == []
    assert session.conversation_history == [
        {"role": "user", "content": "Flights to Chennai"},
        {"role": "assistant", "content": "Where are you flying from?"},
    ]


def test_completion_searches_exactly_once(monkeypatch, session, chennai_query, priced_result):
    extraction = FakeExtraction([ask("Where are you flying from?"), done(chennai_query)])
    search = FakeSearch(priced_result)
    use_collaborators(monkeypatch, extraction, search)
    conversation = SlotFillingConversation(session)

    conversation.handle_turn("Flights to Chennai next week")
    outcome = conversation.handle_turn("From Glasgow, just me")

    assert search.queries == [chennai_query]
    assert outcome.status == ConversationStatus.COMPLETE
    assert conversation.is_complete
    assert outcome.fields == chennai_query
    assert outcome.result == priced_result
    assert outcome.error is None
    assert outcome.replies == [
        TRANSITION_NOTICE,
        f"I found flights starting from £289.50. See all options and book here: {priced_result.redirect_url}",
    ]
    assert extraction.transcripts[1] == (
        "user: Flights to Chennai next week\n"
        "assistant: Where are you flying from?\n"
        "user: From Glasgow, just me"
    )

    entries = transaction_logs[CONVERSATION_CHANNEL].list()
    assert [e.price for e in entries] == [289.5]
    assert transaction_logs[DIRECT_CHANNEL].list() == []

    with pytest.raises(ConversationClosedError):
        conversation.handle_turn("And a hotel?")
    assert len(search.queries) == 1


def test_price_miss_points_to_the_results_page(monkeypatch, session, chennai_query, priced_result):
    missed = priced_result.model_copy(update={"flights": [], "cheapest_price": None})
    use_collaborators(monkeypatch, FakeExtraction([done(chennai_query)]), FakeSearch(missed))

    outcome = SlotFillingConversation(session).handle_turn("Glasgow to Chennai next week, 1 adult")

    assert outcome.status == ConversationStatus.COMPLETE
    assert "couldn't extract the flight details" in outcome.replies[1]
    assert outcome.replies[1].endswith(missed.redirect_url)


def test_unresolvable_date_keeps_conversation_open(monkeypatch, session, chennai_query, priced_result):
    someday = chennai_query.model_copy(update={"dates": "someday"})
    extraction = FakeExtraction([done(someday), done(chennai_query)])
    search = FakeSearch(error=InvalidDateError("someday"))
    use_collaborators(monkeypatch, extraction, search)
    conversation = SlotFillingConversation(session)

    outcome = conversation.handle_turn("Glasgow to Chennai someday")

    assert outcome.error == "invalid_date"
    assert outcome.status == ConversationStatus.INCOMPLETE
    assert outcome.result is None
    assert len(outcome.replies) == 1
    assert "'someday'" in outcome.replies[0]
    assert not conversation.is_complete
    assert transaction_logs[CONVERSATION_CHANNEL].list() == []

    search.error = None
    search.result = priced_result
    retry = conversation.handle_turn("Next week then")

    assert retry.status == ConversationStatus.COMPLETE
    assert retry.result == priced_result

    assert extraction.transcripts[1].startswith("user: Glasgow to Chennai someday\nassistant: I couldn't work out")
    assert extraction.transcripts[1].endswith("user: Next week then")
    assert len(search.queries) == 2


def test_network_failure_is_reported(monkeypatch, session, chennai_query):
    use_collaborators(
        monkeypatch,
        FakeExtraction([done(chennai_query)]),
        FakeSearch(error=NetworkError("proxy refused")),
    )

    outcome = SlotFillingConversation(session).handle_turn("Glasgow to Chennai next week")

    assert outcome.error == "network"
    assert outcome.replies == [TRANSITION_NOTICE, nodes.NETWORK_MESSAGE]


def test_configuration_error_propagates(monkeypatch, session, chennai_query):
    use_collaborators(
        monkeypatch,
        FakeExtraction([done(chennai_query)]),
        FakeSearch(error=ConfigurationError("Missing proxy configuration: PROXY_HOST")),
    )

    with pytest.raises(ConfigurationError):
        SlotFillingConversation(session).handle_turn("Glasgow to Chennai next week")


def test_render_transcript():
    history = [{"role": "user", "content": "hi"}, {"role": "assistant", "content": "hello"}]
    assert render_transcript(history) == "user: hi\nassistant: hello"


def test_completed_session_is_replaced_with_a_fresh_one(chennai_query):
    sessions = SessionService()
    session = sessions.create_session()
    session.status = ConversationStatus.COMPLETE
    session.fields = chennai_query
    sessions.update_session(session)

    fresh = sessions.get_open_session(session.session_id)

    assert fresh.session_id != session.session_id
    assert fresh.status == ConversationStatus.INCOMPLETE
    assert sessions.get_session(session.session_id) is None


def test_session_round_trips_through_the_store(chennai_query, priced_result):
    sessions = SessionService()
    session = sessions.create_session()
    session.conversation_history.append({"role": "user", "content": "hi"})
    session.last_result = priced_result
    sessions.update_session(session)

    restored = sessions.get_open_session(session.session_id)

    assert restored.session_id == session.session_id
    assert restored.conversation_history == [{"role": "user", "content": "hi"}]
    assert restored.last_result.model_dump() == priced_result.model_dump()


def test_session_store_evicts_oldest_when_full():
    sessions = SessionService(max_entries=2)
    first = sessions.create_session()
    second = sessions.create_session()
    third = sessions.create_session()

    assert sessions.get_session(first.session_id) is None
    assert sessions.get_session(second.session_id) is not None
    assert sessions.get_session(third.session_id) is not None
    assert len(sessions.sessions) == 2
