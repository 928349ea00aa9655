import requests

from conftest import FakeResponse, fail
from housing_portal.chat.session import ERROR_MESSAGE, QUICK_QUESTIONS, WELCOME_MESSAGE, ChatSession


def _reply(text):
    return FakeResponse({"success": True, "response": text})


class TestChatSession:

    def test_welcome_is_display_only(self, api):
        chat = ChatSession(api)
        assert chat.transcript[0].content == WELCOME_MESSAGE
        assert chat.transcript[0].role == "assistant"
        assert chat.history == []

    def test_blank_message_ignored(self, api, session):
        chat = ChatSession(api)
        assert chat.send("   ") is False
        assert chat.send(None) is False
        assert len(chat.transcript) == 1
        assert session.calls == []

    def test_success_appends_pair(self, api, session):
        session.add_handler("POST", "ai-chat", lambda kwargs: _reply("Two deadlines this month."))
        chat = ChatSession(api)

        assert chat.send("What are the upcoming deadlines?") is True

        assert [m.role for m in chat.transcript] == ["assistant", "user", "assistant"]
        assert chat.last_reply.content == "Two deadlines this month."
        assert [t.to_dict() for t in chat.history] == [
            {"role": "user", "content": "What are the upcoming deadlines?"},
            {"role": "assistant", "content": "Two deadlines this month."},
        ]
        assert not chat.in_flight

    def test_history_sent_with_next_message(self, api, session):
        session.add_handler("POST", "ai-chat", lambda kwargs: _reply("ok"))
        chat = ChatSession(api)
        chat.send("first")
        chat.send("second")

        body = session.calls_to("POST", "ai-chat")[1][2]["json"]
        assert body["message"] == "second"
        assert body["chat_history"] == [
            {"role": "user", "content": "first"},
            {"role": "assistant", "content": "ok"},
        ]

    def test_server_error_leaves_history_untouched(self, api, session):
        session.add("POST", "ai-chat", fail("Model unavailable"), status_code=503)
        chat = ChatSession(api)

        chat.send("Status of Cedar Court?")

        assert chat.history == []
        assert chat.transcript[-1].is_error
        assert chat.transcript[-1].content == ERROR_MESSAGE
        assert not chat.in_flight

    def test_network_error_keeps_history_even(self, api, session):
        session.add_handler("POST", "ai-chat", lambda kwargs: _reply("fine"))
        chat = ChatSession(api)
        chat.send("hello")

        session.add_error("POST", "ai-chat", requests.ConnectionError("reset"))
        chat.send("again")

        assert len(chat.history) == 2
        assert [m.role for m in chat.transcript][-2:] == ["user", "assistant"]

    def test_in_flight_send_is_noop(self, api, session):
        chat = ChatSession(api)
        nested = {}

        def handler(kwargs):
            nested["result"] = chat.send("second question")
            return _reply("answer")

        session.add_handler("POST", "ai-chat", handler)
        chat.send("first question")

        assert nested["result"] is False
        assert len(session.calls_to("POST", "ai-chat")) == 1
        assert [m.content for m in chat.transcript if m.role == "user"] == ["first question"]

    def test_message_ids_unique(self, api, session):
        session.add_handler("POST", "ai-chat", lambda kwargs: _reply("ok"))
        chat = ChatSession(api)
        chat.send("a")
        chat.send("b")
        ids = [m.id for m in chat.transcript]
        assert len(ids) == len(set(ids))

    def test_quick_question(self):
        assert ChatSession.quick_question(2) == QUICK_QUESTIONS[2][1]
