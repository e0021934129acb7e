"""Tests for ConversationStore."""

import threading

import pytest

from lutobot.agent.conversation import ConversationStore
from lutobot.agent.models import AgentMessage


def test_create_conversation_unique_and_empty():
    store = ConversationStore()
    a, b = store.create_conversation(), store.create_conversation()
    assert a != b
    assert store.get_messages(a) == []
    assert a in store and len(store) == 2


def test_history_bounded_to_most_recent_twenty():
    store = ConversationStore()
    cid = store.create_conversation()
    for i in range(25):
        store.append_message(cid, AgentMessage.from_user(f"msg {i}"))

    history = store.get_messages(cid)
    assert len(history) == 20
    assert [m.content for m in history] == [f"msg {i}" for i in range(5, 25)]


def test_custom_limit():
    store = ConversationStore(limit=3)
    for i in range(5):
        store.append_message("c", AgentMessage.from_user(str(i)))
    assert [m.content for m in store.get_messages("c")] == ["2", "3", "4"]


def test_invalid_limit():
    with pytest.raises(ValueError):
        ConversationStore(limit=0)


def test_unknown_id_reads_empty_and_append_creates():
    store = ConversationStore()
    assert store.get_messages("never-seen") == []
    assert "never-seen" not in store

    store.append_message("never-seen", AgentMessage.from_user("hello"))
    assert [m.content for m in store.get_messages("never-seen")] == ["hello"]


def test_get_messages_returns_copy():
    store = ConversationStore()
    cid = store.create_conversation()
    store.append_message(cid, AgentMessage.from_user("a"))
    snapshot = store.get_messages(cid)
    snapshot.clear()
    assert len(store.get_messages(cid)) == 1


def test_concurrent_appends_keep_bound():
    store = ConversationStore()
    cid = store.create_conversation()

    def writer(n):
        for i in range(50):
            store.append_message(cid, AgentMessage.from_user(f"{n}-{i}"))

    threads = [threading.Thread(target=writer, args=(n,)) for n in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(store.get_messages(cid)) == 20
