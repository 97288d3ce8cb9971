"""MockTransport-based coverage for RequestClient.download and DownloadManager."""

import asyncio
import logging

import httpx
import pytest

from axer.http.download import DownloadManager, DownloadTask, partial_path

PAYLOAD = b"0123456789" * 1000


def _serve_payload(request: httpx.Request) -> httpx.Response:
    return httpx.Response(
        200,
        headers={"Content-Type": "application/pdf", "Content-Length": str(len(PAYLOAD))},
        content=PAYLOAD,
    )


def _download(client, url, path):
    async def run():
        async with client:
            return await client.download(url, path)

    return asyncio.run(run())


def test_existing_file_short_circuits_without_request(tmp_path, make_client):
    calls = []

    def handler(request):
        calls.append(request)
        return _serve_payload(request)

    dest = tmp_path / "a.pdf"
    dest.write_bytes(b"old")

    result = _download(make_client(handler), "https://example.com/a.pdf", str(dest))

    assert result == "https://example.com/a.pdf"
    assert calls == []
    assert dest.read_bytes() == b"old"


def test_download_writes_streamed_content(tmp_path, make_client):
    dest = tmp_path / "nested" / "dir" / "a.pdf"

    result = _download(make_client(_serve_payload), "https://example.com/a.pdf", dest)

    assert result == "https://example.com/a.pdf"
    assert dest.read_bytes() == PAYLOAD
    assert not partial_path(dest).exists()


def test_download_logs_lifecycle(tmp_path, make_client, caplog):
    caplog.set_level(logging.INFO)

    _download(make_client(_serve_payload), "https://example.com/a.pdf", tmp_path / "a.pdf")

    assert "Status: 200" in caplog.text
    assert "Content-Type: application/pdf" in caplog.text
    assert f"Content-Length: {len(PAYLOAD)}" in caplog.text
    assert "Download success" in caplog.text


def test_download_follows_redirects(tmp_path, make_client):
    def handler(request):
        if request.url.path == "/latest":
            return httpx.Response(302, headers={"Location": "/v2/a.pdf"})
        return _serve_payload(request)

    dest = tmp_path / "a.pdf"
    _download(make_client(handler), "https://example.com/latest", dest)

    assert dest.read_bytes() == PAYLOAD


def test_download_error_rejects_and_leaves_no_file(tmp_path, make_client, caplog):
    def handler(request):
        raise httpx.ConnectError("boom", request=request)

    dest = tmp_path / "a.pdf"

    with pytest.raises(httpx.ConnectError, match="boom"):
        _download(make_client(handler), "https://example.com/a.pdf", dest)

    assert not dest.exists()
    assert not partial_path(dest).exists()
    assert "Download failed: boom" in caplog.text


def test_error_status_is_not_cached_and_retry_succeeds(tmp_path, make_client):
    dest = tmp_path / "a.pdf"

    def not_found(request):
        return httpx.Response(404, text="missing")

    with pytest.raises(httpx.HTTPStatusError):
        _download(make_client(not_found), "https://example.com/a.pdf", dest)

    assert not dest.exists()

    _download(make_client(_serve_payload), "https://example.com/a.pdf", dest)

    assert dest.read_bytes() == PAYLOAD


def test_stale_partial_file_does_not_count_as_downloaded(tmp_path, make_client):
    dest = tmp_path / "a.pdf"
    partial_path(dest).write_bytes(b"trunc")

    _download(make_client(_serve_payload), "https://example.com/a.pdf", dest)

    assert dest.read_bytes() == PAYLOAD
    assert not partial_path(dest).exists()


def test_download_task_converts_str_path(tmp_path):
    task = DownloadTask("https://example.com/a.pdf", str(tmp_path / "a.pdf"))

    assert task.save_path == tmp_path / "a.pdf"


def test_manager_counts_successes_and_reports_each_task(tmp_path, make_client):
    def handler(request):
        if request.url.path == "/broken.pdf":
            return httpx.Response(500)
        return _serve_payload(request)

    finished = []
    client = make_client(handler)

    async def run():
        async with client:
            manager = DownloadManager(client, max_workers=2, show_progress=False)
            manager.add_task("https://example.com/a.pdf", tmp_path / "a.pdf")
            manager.add_task("https://example.com/b.pdf", tmp_path / "b.pdf")
            manager.add_task("https://example.com/broken.pdf", tmp_path / "broken.pdf")
            assert len(manager) == 3
            count = await manager.execute(callback=lambda task, ok: finished.append((task.save_path.name, ok)))
            return manager, count

    manager, count = asyncio.run(run())

    assert count == 2
    assert sorted(finished) == [("a.pdf", True), ("b.pdf", True), ("broken.pdf", False)]
    assert len(manager) == 0
    assert (tmp_path / "a.pdf").read_bytes() == PAYLOAD
    assert not (tmp_path / "broken.pdf").exists()


def test_manager_without_tasks_returns_zero(make_client):
    manager = DownloadManager(make_client(_serve_payload), show_progress=False)

    assert asyncio.run(manager.execute()) == 0


def test_manager_rejects_zero_workers(make_client):
    with pytest.raises(ValueError):
        DownloadManager(make_client(_serve_payload), max_workers=0)


def test_manager_logs_invalid_url_and_finishes_other_tasks(tmp_path, make_client, caplog):
    client = make_client(_serve_payload)

    async def run():
        async with client:
            manager = DownloadManager(client, show_progress=False)
            manager.add_task("https://example.com/a.pdf", tmp_path / "a.pdf")
            manager.add_task("https://exa\u0000mple.com/b.pdf", tmp_path / "b.pdf")
            return await manager.execute()

    assert asyncio.run(run()) == 1
    assert (tmp_path / "a.pdf").read_bytes() == PAYLOAD
    assert "Failed to download https://exa" in caplog.text


def test_cancelled_download_removes_partial_file(tmp_path, make_client):
    async def interrupted_body():
        yield b"first chunk"
        raise asyncio.CancelledError()

    def handler(request):
        return httpx.Response(200, content=interrupted_body())

    dest = tmp_path / "a.pdf"
    client = make_client(handler)

    async def run():
        async with client:
            with pytest.raises(asyncio.CancelledError):
                await client.download("https://example.com/a.pdf", dest)

    asyncio.run(run())

    assert not dest.exists()
    assert not partial_path(dest).exists()
