"""
Scripted chatbot.

Echoes the user's message with a canned follow-up. Nothing is persisted.
"""

GREETING = "Hello! How can I help you?"
FOLLOW_UP = "How can I assist you further?"


class Chatbot:
    """Holds the latest response shown in the chat tab."""

    def __init__(self):
        self.response = GREETING

    def send(self, message: str) -> str:
        self.response = f"You said: {message}\nChatbot: {FOLLOW_UP}"
        return self.response
