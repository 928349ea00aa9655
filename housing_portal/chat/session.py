"""
AI assistant chat session.

Keeps two lists:
- transcript: every message shown to the user, including error notices
- history: the clean user/assistant pairs sent back as context
"""

import logging
from datetime import datetime
from typing import List, Optional, Tuple

from housing_portal.api.client import ApiClient
from housing_portal.core.domain_models import ChatHistoryTurn, ChatMessage
from housing_portal.core.errors import PortalError
from housing_portal.core.utils import id_sequence


logger = logging.getLogger(__name__)

WELCOME_MESSAGE = (
    "Hello! I'm your AI assistant for affordable housing project management. "
    "I can help you with:\n\n"
    "• Project status and funding information\n"
    "• Application deadlines and requirements\n"
    "• Document organization and compliance\n"
    "• Financial analysis and projections\n"
    "• Stakeholder communication\n\n"
    "What would you like to know about your projects?"
)

ERROR_MESSAGE = (
    "I apologize, but I'm having trouble connecting right now. "
    "Please try again in a moment."
)

QUICK_QUESTIONS: Tuple[Tuple[str, str], ...] = (
    ("Project Status", "What's the status of Dallas Mill Station?"),
    ("Funding", "Show me all funding applications due this month"),
    ("Deadlines", "What are the upcoming deadlines?"),
    ("Documents", "Help me organize LIHTC application documents"),
)


class ChatSession:
    """
    Single-flight conversation with the /ai-chat endpoint.

    Usage:
        session = ChatSession(api)
        session.send("What are the upcoming deadlines?")
        print(session.transcript[-1].content)
    """

    def __init__(self, api: ApiClient):
        self.api = api
        self._ids = id_sequence()
        self.transcript: List[ChatMessage] = [self._message("assistant", WELCOME_MESSAGE)]
        self.history: List[ChatHistoryTurn] = []
        self.in_flight = False

    def _message(self, role: str, content: str, is_error: bool = False) -> ChatMessage:
        return ChatMessage(
            id=next(self._ids),
            role=role,
            content=content,
            timestamp=datetime.now(),
            is_error=is_error,
        )

    def send(self, text: Optional[str]) -> bool:
        """
        Send a user message and record the reply.

        Returns:
            False if ignored (blank text or a request already in flight)
        """
        if not text or not text.strip() or self.in_flight:
            return False

        self.transcript.append(self._message("user", text))
        self.in_flight = True

        try:
            reply = self._ask(text)
        except PortalError as e:
            logger.error(f"Error sending message: {e}")
            self.transcript.append(self._message("assistant", ERROR_MESSAGE, is_error=True))
        else:
            self.transcript.append(self._message("assistant", reply))
            self.history.extend([
                ChatHistoryTurn("user", text),
                ChatHistoryTurn("assistant", reply),
            ])
        finally:
            self.in_flight = False

        return True

    def _ask(self, text: str) -> str:
        body = {
            "message": text,
            "chat_history": [turn.to_dict() for turn in self.history],
        }
        reply = self.api.post_json("ai-chat", body)
        return "" if reply is None else str(reply)

    @staticmethod
    def quick_question(index: int) -> str:
        return QUICK_QUESTIONS[index][1]

    @property
    def last_reply(self) -> Optional[ChatMessage]:
        for message in reversed(self.transcript):
            if message.role == "assistant":
                return message
        return None
