"""
Tests for the lazily created, process-wide database engine
"""

import threading
import time

from sqlalchemy import create_engine as real_create_engine

from app import database


def test_concurrent_first_use_connects_once(monkeypatch):
    calls = []

    def slow_create_engine(url, **kwargs):
        calls.append(url)
        time.sleep(0.2)
        return real_create_engine("sqlite://")

    monkeypatch.setattr(database, "_engine", None)
    monkeypatch.setattr(database, "_SessionLocal", None)
    monkeypatch.setattr(database, "create_engine", slow_create_engine)

    results = []
    start = threading.Barrier(8)

    def first_use():
        start.wait()
        results.append(database.get_engine())

    threads = [threading.Thread(target=first_use) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(calls) == 1
    assert len(results) == 8
    assert all(engine is results[0] for engine in results)


def test_get_db_yields_session_on_shared_engine(monkeypatch):
    monkeypatch.setattr(database, "_engine", None)
    monkeypatch.setattr(database, "_SessionLocal", None)
    monkeypatch.setattr(database.config, "DATABASE_URL", "sqlite://")

    db_gen = database.get_db()
    session = next(db_gen)
    try:
        assert session.get_bind() is database.get_engine()
    finally:
        db_gen.close()
