import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from allowork.services.message_store import (
    CANNED_REPLY,
    CONVERSATION_STARTED,
    MessageStore,
    MessageStoreError,
    MessageStoreNotFoundError,
    MessageStorePermissionError,
)


class ManualScheduler:
    def __init__(self):
        self.now = 0.0
        self._seq = 0
        self._pending = []

    def call_later(self, delay, callback):
        self._pending.append((self.now + delay, self._seq, callback))
        self._seq += 1

    def advance(self, seconds):
        target = self.now + seconds
        while True:
            due = [item for item in self._pending if item[0] <= target]
            if not due:
                break
            nxt = min(due, key=lambda item: (item[0], item[1]))
            self._pending.remove(nxt)
            self.now = nxt[0]
            nxt[2]()
        self.now = target


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def store(scheduler):
    return MessageStore(scheduler=scheduler, read_receipt_delay=1.5, typing_delay=2.5, reply_delay=5.0)


def _messages_between(store, user_a, user_b):
    return [
        m
        for m in store.snapshot()["messages"]
        if {m.sender_id, m.receiver_id} == {user_a, user_b}
    ]


def test_send_appends_exactly_one_unread_message(store):
    before = len(_messages_between(store, "u2", "p1"))
    sent = store.send_message("c1", sender_id="u2", content="Bonjour, êtes-vous libre samedi ?")

    after = _messages_between(store, "u2", "p1")
    assert len(after) == before + 1
    assert after[-1].id == sent.id
    assert sent.read is False
    assert sent.receiver_id == "p1"

    conversation = store.get_conversation("c1")
    assert conversation.last_message.id == sent.id
    assert conversation.unread_count == 0


def test_simulation_runs_read_typing_reply_in_order(store, scheduler):
    sent = store.send_message("c1", sender_id="u2", content="Pouvez-vous passer demain ?")

    scheduler.advance(1.25)
    assert not next(m for m in store.get_messages("c1", "u2") if m.id == sent.id).read
    assert not store.is_typing("c1")

    scheduler.advance(0.25)
    assert next(m for m in store.get_messages("c1", "u2") if m.id == sent.id).read
    assert not store.is_typing("c1")

    scheduler.advance(1.0)
    assert store.is_typing("c1")
    assert store.get_messages("c1", "u2")[-1].id == sent.id

    scheduler.advance(2.5)
    assert not store.is_typing("c1")
    reply = store.get_messages("c1", "u2")[-1]
    assert reply.content == CANNED_REPLY
    assert reply.sender_id == "p1"
    assert reply.receiver_id == "u2"
    assert reply.read is False
    assert store.get_conversation("c1").last_message.id == reply.id


def test_rapid_sends_each_produce_a_canned_reply(store, scheduler):
    before = len(store.get_messages("c1", "u2"))
    store.send_message("c1", sender_id="u2", content="Premier message")
    scheduler.advance(1.0)
    store.send_message("c1", sender_id="u2", content="Deuxième message")
    scheduler.advance(10.0)

    messages = store.get_messages("c1", "u2")
    assert len(messages) == before + 4
    replies = [m for m in messages[before:] if m.content == CANNED_REPLY]
    assert len(replies) == 2
    assert all(m.read for m in messages[before:] if m.sender_id == "u2")


def test_reply_increments_unread_and_opening_resets_it(store, scheduler):
    store.mark_conversation_read("c1", viewer_id="u2")
    assert store.get_conversation("c1").unread_count == 0

    store.send_message("c1", sender_id="u2", content="Merci d'avance")
    scheduler.advance(5.0)

    assert store.get_conversation("c1").unread_count == 1
    assert store.unread_message_count("u2") == 1
    assert store.unread_message_count("p1") == 0

    store.mark_conversation_read("c1", viewer_id="u2")
    assert store.get_conversation("c1").unread_count == 0
    assert store.unread_message_count("u2") == 0
    assert all(m.read for m in store.get_messages("c1", "u2") if m.receiver_id == "u2")


def test_seed_conversation_counts_as_unread_for_client(store):
    assert store.unread_message_count("u2") == 1
    assert store.unread_message_count("p1") == 0


def test_start_conversation_reuses_existing_pair(store):
    assert store.start_conversation("p1", "u2").id == "c1"

    created = store.start_conversation("u2", "p3")
    assert created.participants == ["u2", "p3"]
    assert created.last_message.content == CONVERSATION_STARTED
    assert created.last_message.read is True
    assert store.start_conversation("p3", "u2").id == created.id
    assert store.list_conversations("u2")[0].id == created.id


def test_send_rejects_blank_unknown_and_foreign(store, scheduler):
    with pytest.raises(MessageStoreError):
        store.send_message("c1", sender_id="u2", content="   ")
    with pytest.raises(MessageStoreNotFoundError):
        store.send_message("missing", sender_id="u2", content="hello")
    with pytest.raises(MessageStorePermissionError):
        store.send_message("c1", sender_id="p2", content="hello")
    with pytest.raises(MessageStoreError):
        store.start_conversation("u2", "u2")

    scheduler.advance(10.0)
    assert store.get_messages("c1", "u2")[-1].content != CANNED_REPLY


def test_reply_arriving_while_marking_read_stays_last(store, monkeypatch):
    original = store.get_conversation
    delivered = []

    def get_then_reply(conversation_id):
        conversation = original(conversation_id)
        if not delivered:
            delivered.append(True)
            store._deliver_canned_reply(conversation_id, sender_id="p1", receiver_id="u2")
        return conversation

    monkeypatch.setattr(store, "get_conversation", get_then_reply)
    store.mark_conversation_read("c1", viewer_id="p1")
    monkeypatch.undo()

    conversation = store.get_conversation("c1")
    assert delivered
    assert conversation.last_message.content == CANNED_REPLY
    assert conversation.last_message.id == store.get_messages("c1", "u2")[-1].id


def test_start_conversation_requires_known_users(scheduler):
    known = {"u2", "p1", "p3"}
    store = MessageStore(scheduler=scheduler, user_exists=known.__contains__)

    with pytest.raises(MessageStoreNotFoundError):
        store.start_conversation("u2", "ghost")
    with pytest.raises(MessageStoreNotFoundError):
        store.start_conversation("ghost", "p3")
    assert store.start_conversation("u2", "p3").participants == ["u2", "p3"]
