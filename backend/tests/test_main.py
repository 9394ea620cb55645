"""
Tests for app-level maintenance wiring
"""
import asyncio

import pytest

from academy import main


@pytest.mark.asyncio
async def test_cleanup_watcher_task_is_held_until_done(monkeypatch):
    runs = []
    monkeypatch.setattr(main, "_purge_tokens", lambda: runs.append(1))

    task = main.start_cleanup_watcher()
    assert task in main._background_tasks

    await asyncio.sleep(0)
    assert runs == [1]

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    await asyncio.sleep(0)
    assert task not in main._background_tasks


def test_info_reports_configuration(anonymous_client):
    body = anonymous_client.get("/info").json()
    assert body["gemini_configured"] is True
    assert body["report_valid_days"] == 30
