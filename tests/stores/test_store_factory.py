"""Tests for review store selection and demo seeding."""

from __future__ import annotations

import pytest

from tastyreply.stores import InMemoryReviewStore, SqlReviewStore, build_review_store
from tastyreply.stores import factory


def test_memory_backend(settings):
    store = build_review_store(settings)
    assert isinstance(store, InMemoryReviewStore)
    assert store.backend == "memory"


def test_sql_backend(settings):
    store = build_review_store(settings.model_copy(update={"review_store_backend": "sql"}))
    assert isinstance(store, SqlReviewStore)
    assert store.ping() is True


def test_unreachable_database_falls_back_to_memory(settings, monkeypatch):
    def broken_engine(url):
        raise RuntimeError("connection refused")

    monkeypatch.setattr(factory, "create_db_engine", broken_engine)
    store = build_review_store(settings.model_copy(update={"review_store_backend": "sql"}))

    assert isinstance(store, InMemoryReviewStore)


def test_failed_ping_falls_back_to_memory(settings, monkeypatch):
    monkeypatch.setattr(SqlReviewStore, "ping", lambda self: False)
    store = build_review_store(settings.model_copy(update={"review_store_backend": "sql"}))

    assert isinstance(store, InMemoryReviewStore)


def test_unknown_backend_rejected(settings):
    with pytest.raises(ValueError):
        build_review_store(settings.model_copy(update={"review_store_backend": "mongo"}))


def test_demo_reviews_seeded_per_user(settings):
    store = build_review_store(settings.model_copy(update={"seed_demo_reviews": True}))

    reviews = store.list_reviews("user-a")
    assert [r["customer_name"] for r in reviews] == ["Sarah Johnson", "Mike Chen"]
    assert reviews[0]["replied"] is False
    assert reviews[1]["reply"]["text"] == "Thank you for your feedback, Mike!"
    assert store.count_reviews("user-b") == 2
    assert store.list_reviews("user-b")[0]["id"] != reviews[0]["id"]


def test_demo_seeding_happens_once(settings):
    store = build_review_store(settings.model_copy(update={"seed_demo_reviews": True}))
    review = store.list_reviews("user-a")[0]
    store.delete_review(review["id"], "user-a")

    assert store.count_reviews("user-a") == 1
