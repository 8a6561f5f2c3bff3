"""Tests for the conversation memory store."""

import pytest

from stepflow.core.memory import MemoryStore, bag_of_words, cosine_similarity, format_context


@pytest.fixture
def store():
    memory = MemoryStore(last_messages=2)
    for text in [
        "I love hiking in the mountains",
        "pizza is my favorite food",
        "the weather is nice today",
        "ok",
        "thanks",
    ]:
        memory.append("user-1", "thread-a", "user", text)
    return memory


class TestRecent:
    def test_window_keeps_newest_in_order(self, store):
        recent = store.recent("user-1", "thread-a")
        assert [m.content for m in recent] == ["ok", "thanks"]
        assert [m.index for m in recent] == [3, 4]

    def test_explicit_window(self, store):
        assert len(store.recent("user-1", "thread-a", last_messages=10)) == 5
        assert store.recent("user-1", "thread-a", last_messages=0) == []

    def test_unknown_thread(self, store):
        assert store.recent("user-1", "nope") == []

    def test_threads(self, store):
        store.append("user-1", "thread-b", "user", "hello")
        store.append("user-2", "thread-c", "user", "hello")
        assert store.threads("user-1") == ["thread-a", "thread-b"]


class TestRecall:
    def test_best_match_first_with_context(self, store):
        hits = store.recall("user-1", "mountains hiking", top_k=1, message_range=2)
        assert len(hits) == 1
        assert hits[0].message.content == "I love hiking in the mountains"
        assert [m.index for m in hits[0].context] == [1, 2]

    def test_excludes_recent_window_of_current_thread(self, store):
        hits = store.recall("user-1", "thanks", thread_id="thread-a")
        assert hits == []
        assert store.recall("user-1", "thanks")[0].message.content == "thanks"

    def test_searches_other_threads_of_resource_only(self, store):
        store.append("user-1", "thread-b", "user", "favorite food is sushi")
        store.append("user-2", "thread-z", "user", "favorite food is tacos")
        hits = store.recall("user-1", "favorite food", top_k=5)
        assert {h.message.thread_id for h in hits} == {"thread-a", "thread-b"}
        assert all(h.message.resource_id == "user-1" for h in hits)

    def test_store_defaults_used_when_omitted(self):
        narrow = MemoryStore(top_k=1, message_range=0)
        for text in ["hiking trip", "hiking boots", "hiking map"]:
            narrow.append("user-1", "t", "user", text)

        hits = narrow.recall("user-1", "hiking")
        assert len(hits) == 1
        assert hits[0].context == []
        assert len(narrow.recall("user-1", "hiking", top_k=3)) == 3

    def test_custom_embedder(self):
        store = MemoryStore(embedder=lambda text: [float(len(text)), 1.0])
        store.append("r", "t", "user", "abc")
        assert store.recall("r", "xyz")[0].score == pytest.approx(1.0)


class TestWorkingMemory:
    def test_overwrite_wholesale(self, store):
        assert store.get_working_memory("user-1") == {}
        store.set_working_memory("user-1", {"name": "Ada", "goal": "learn"})
        store.set_working_memory("user-1", {"name": "Ada"})
        assert store.get_working_memory("user-1") == {"name": "Ada"}

    def test_returned_copy_is_detached(self, store):
        store.set_working_memory("user-1", {"name": "Ada"})
        store.get_working_memory("user-1")["name"] = "Bob"
        assert store.get_working_memory("user-1") == {"name": "Ada"}


class TestSimilarity:
    def test_bag_of_words(self):
        assert bag_of_words("The the cat") == {"the": 2, "cat": 1}

    def test_cosine(self):
        assert cosine_similarity({"a": 1.0}, {"a": 2.0}) == pytest.approx(1.0)
        assert cosine_similarity({"a": 1.0}, {"b": 1.0}) == 0.0
        assert cosine_similarity([1.0, 0.0], [0.0, 0.0]) == 0.0
        with pytest.raises(ValueError):
            cosine_similarity([1.0], [1.0, 2.0])

    def test_format_context(self, store):
        assert format_context(store.recent("user-1", "thread-a")) == "USER: ok\nUSER: thanks"
