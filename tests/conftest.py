# FILE: tests/conftest.py
"""
Pytest configuration for the ai_tutorial test suite.

Provides offline stand-ins so no test reaches a real model:
- FakeChatClient: records prompts and returns canned replies
- DeterministicFakeEmbedding: hash-based vectors (identical text, identical vector)
- CharacterTextSplitter: replaces the tiktoken-backed token splitter
"""
import sys
from pathlib import Path
from typing import List, Optional
from unittest.mock import Mock

sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest
from fastapi.testclient import TestClient
from langchain_core.documents import Document
from langchain_core.embeddings import DeterministicFakeEmbedding
from langchain_core.vectorstores import InMemoryVectorStore
from langchain_text_splitters import CharacterTextSplitter

from ai_tutorial.generation import ChatClient, get_chat_client
from ai_tutorial.vector_store import VectorStoreRepository, get_vector_store


class FakeChatClient(ChatClient):
    """ChatClient that never calls the SDK.

    The last reply is repeated once the queue is down to one item.
    """

    def __init__(self, replies: Optional[List[str]] = None, error: Optional[Exception] = None):
        super().__init__(client=Mock())
        self.replies = list(replies or ["Why did the scarecrow win an award? He was outstanding in his field."])
        self.error = error
        self.calls: List[list] = []

    def call(self, messages):
        self.calls.append(messages)
        if self.error is not None:
            raise self.error
        if len(self.replies) > 1:
            return self.replies.pop(0)
        return self.replies[0]

    @property
    def last_prompt(self) -> str:
        return self.calls[-1][-1]["content"]


@pytest.fixture
def fake_client():
    return FakeChatClient()


@pytest.fixture
def embedding():
    return DeterministicFakeEmbedding(size=32)


@pytest.fixture
def splitter():
    return CharacterTextSplitter(separator="\n\n", chunk_size=60, chunk_overlap=0)


@pytest.fixture(autouse=True)
def offline_splitter(monkeypatch, splitter):
    """Keep ingestion from downloading the tiktoken encoding."""
    monkeypatch.setattr("ai_tutorial.documents.build_splitter", lambda *a, **kw: splitter)
    return splitter


@pytest.fixture
def repo(tmp_path, embedding):
    return VectorStoreRepository(InMemoryVectorStore(embedding=embedding), tmp_path / "vectorstore.json")


@pytest.fixture
def faq_docs():
    return [
        Document(page_content="We offer cloud architecture and custom software development.",
                 metadata={"filename": "faq.txt"}),
        Document(page_content="Every engagement starts with a free discovery call.",
                 metadata={"filename": "faq.txt"}),
        Document(page_content="Our office is open Monday to Friday.",
                 metadata={"filename": "hours.md"}),
    ]


@pytest.fixture
def seeded_repo(repo, faq_docs):
    repo.store_documents(faq_docs)
    return repo


@pytest.fixture
def api(fake_client, seeded_repo):
    """TestClient with model and index dependencies overridden (startup not run)."""
    from ai_tutorial.main import app

    app.dependency_overrides[get_chat_client] = lambda: fake_client
    app.dependency_overrides[get_vector_store] = lambda: seeded_repo
    client = TestClient(app, raise_server_exceptions=False)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture
def make_client():
    """Factory for FakeChatClient with custom replies or an error."""
    return FakeChatClient
