"""
Pytest configuration for chatcache tests.
Connects mongoengine to an in-memory mongomock client and provides a fake answering service.
"""

import mongomock
import pytest
from mongoengine import disconnect

from ChatEntry import ChatEntry
from ChatStore import ChatStore, connect_store


class FakeAnswerClient:
    """Stands in for AnswerClient and records every question it is asked."""

    def __init__(self, answer="Go to settings", error=None):
        self.reply = answer
        self.error = error
        self.questions = []

    def answer(self, question):
        self.questions.append(question)
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture(scope="session", autouse=True)
def mongo_connection():
    connect_store("mongodb://localhost/chatcache_test", mongo_client_class=mongomock.MongoClient)
    yield
    disconnect()


@pytest.fixture(autouse=True)
def clean_collection():
    ChatEntry.drop_collection()
    yield
    ChatEntry.drop_collection()


@pytest.fixture
def store():
    return ChatStore()


@pytest.fixture
def answer_client():
    return FakeAnswerClient()
