"""Tests for the batch worker job (mocked)."""
from unittest.mock import MagicMock, patch

import storefront.extensions as ext


def test_batch_job_runs_batch(app):
    with patch("storefront.workers.gallery_batch.gallery_service") as mock_gallery:
        mock_gallery.run_batch.return_value.to_dict.return_value = {"success": True}
        from storefront.workers.gallery_batch import run_batch_job

        result = run_batch_job({"trail-cap": "data:image/png;base64,AAAA"})

        mock_gallery.run_batch.assert_called_once_with({"trail-cap": "data:image/png;base64,AAAA"})
        assert result == {"success": True}


def test_batch_job_skips_when_locked(app, monkeypatch):
    fake_redis = MagicMock()
    fake_redis.lock.return_value.acquire.return_value = False
    monkeypatch.setattr(ext, "redis_client", fake_redis)

    with patch("storefront.workers.gallery_batch.gallery_service") as mock_gallery:
        from storefront.workers.gallery_batch import run_batch_job

        assert run_batch_job({}) is None
        mock_gallery.run_batch.assert_not_called()


def test_batch_job_releases_lock(app, monkeypatch):
    fake_redis = MagicMock()
    lock = fake_redis.lock.return_value
    lock.acquire.return_value = True
    monkeypatch.setattr(ext, "redis_client", fake_redis)

    with patch("storefront.workers.gallery_batch.gallery_service"):
        from storefront.workers.gallery_batch import run_batch_job

        run_batch_job({})
    lock.release.assert_called_once()


def test_dummy_queue_drops_job(caplog):
    with caplog.at_level("WARNING", logger="storefront.extensions"):
        assert ext.DummyQueue().enqueue("run_batch_job", {}) is None
    assert "gallery batch job not queued" in caplog.text
