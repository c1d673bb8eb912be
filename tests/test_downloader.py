"""测试下载器模块"""

import aiohttp
import pytest
from aioresponses import aioresponses
from yarl import URL

from promised.downloader import (
    Downloader,
    download_file,
    download_files,
    download_files_sync,
)
from promised.exceptions import StatusError, StorageError, TransportError, ValidationError
from promised.models import Config, DownloadProgress, HlsMode

from .utils.mock_http import create_network_error

BASE = "http://files.test/data"


class TestDownloader:
    """测试Downloader"""

    def test_init_with_custom_config(self, config):
        downloader = Downloader(config=config)

        assert downloader.config is config
        assert downloader.client.config is config
        assert downloader.progress_callback is None

    @pytest.mark.asyncio
    async def test_context_manager(self, config):
        """测试异步上下文管理器"""
        async with Downloader(config=config) as downloader:
            assert downloader.client._session is not None
        assert downloader.client._session is None

    @pytest.mark.asyncio
    async def test_download_file_derives_filename(self, config, download_dir):
        with aioresponses() as m:
            m.get(f"{BASE}/report.csv", status=200, body=b"a,b\n1,2\n")

            async with Downloader(config=config) as downloader:
                path = await downloader.download_file(
                    f"{BASE}/report.csv", target_directory=download_dir
                )

        assert path == str(download_dir / "report.csv")
        assert (download_dir / "report.csv").read_bytes() == b"a,b\n1,2\n"

    @pytest.mark.asyncio
    async def test_download_file_with_explicit_filename(self, config, download_dir):
        with aioresponses() as m:
            m.get(f"{BASE}/report.csv", status=200, body=b"content")

            async with Downloader(config=config) as downloader:
                path = await downloader.download_file(
                    f"{BASE}/report.csv", "renamed.csv", download_dir
                )

        assert path.endswith("renamed.csv")
        assert (download_dir / "renamed.csv").read_bytes() == b"content"

    @pytest.mark.asyncio
    async def test_failure_propagates_after_retries(self, download_dir):
        config = Config(download_max_attempts=2, download_retry_delay=0.0)
        url = f"{BASE}/missing.bin"
        with aioresponses() as m:
            m.get(url, status=404, repeat=True)

            async with Downloader(config=config) as downloader:
                with pytest.raises(StatusError) as exc_info:
                    await downloader.download_file(url, target_directory=download_dir)

            assert len(m.requests[("GET", URL(url))]) == 3

        assert exc_info.value.status_code == 404
        assert not (download_dir / "missing.bin").exists()

    @pytest.mark.asyncio
    async def test_transient_error_is_retried(self, retry_config, download_dir):
        url = f"{BASE}/flaky.bin"
        with aioresponses() as m:
            m.get(url, exception=aiohttp.ClientConnectionError("reset"))
            m.get(url, status=200, body=b"second time lucky")

            async with Downloader(config=retry_config) as downloader:
                path = await downloader.download_file(url, target_directory=download_dir)

        assert (download_dir / "flaky.bin").read_bytes() == b"second time lucky"
        assert path == str(download_dir / "flaky.bin")

    @pytest.mark.asyncio
    async def test_progress_callback(self, config, download_dir):
        updates = []
        body = b"z" * 20000
        with aioresponses() as m:
            m.get(f"{BASE}/big.bin", status=200, body=body)

            async with Downloader(config=config, progress_callback=updates.append) as downloader:
                await downloader.download_file(f"{BASE}/big.bin", target_directory=download_dir)

        assert updates
        assert all(isinstance(update, DownloadProgress) for update in updates)
        assert updates[-1].downloaded == len(body)
        assert updates[-1].filename == str(download_dir / "big.bin")

    @pytest.mark.asyncio
    async def test_url_without_filename(self, config):
        async with Downloader(config=config) as downloader:
            with pytest.raises(ValidationError):
                await downloader.download_file("http://files.test/")

    @pytest.mark.asyncio
    async def test_fetch_hls(self, config, master_playlist, media_playlist):
        master = "http://cdn.test/show/master.m3u8"
        with aioresponses() as m:
            m.get(master, status=200, body=master_playlist)
            m.get("http://cdn.test/show/low/index.m3u8", status=200, body=media_playlist)

            async with Downloader(config=config) as downloader:
                streams = await downloader.fetch_hls(master, HlsMode.WORST)

        assert len(streams) == 1
        assert streams[0].uri == "low/index.m3u8"
        assert len(streams[0].segments) == 2


class TestDownloadFiles:
    """测试批量下载"""

    @pytest.mark.asyncio
    async def test_partial_failure_is_isolated(self, config, download_dir):
        urls = [f"{BASE}/file{i}.txt" for i in range(5)]
        with aioresponses() as m:
            for i, url in enumerate(urls):
                if i == 2:
                    m.get(url, exception=create_network_error("down"), repeat=True)
                else:
                    m.get(url, status=200, body=f"content {i}")

            async with Downloader(config=config) as downloader:
                items = await downloader.download_files(urls, target_directory=download_dir, width=2)

        assert [item.index for item in items] == [0, 1, 2, 3, 4]
        assert [item.url for item in items] == urls

        failed = items[2]
        assert not failed.success
        assert isinstance(failed.error, TransportError)
        assert failed.resolved_filename is None
        assert not (download_dir / "file2.txt").exists()

        for i in (0, 1, 3, 4):
            assert items[i].success
            assert items[i].error is None
            assert (download_dir / f"file{i}.txt").read_text() == f"content {i}"

    @pytest.mark.asyncio
    async def test_partial_filenames(self, config, download_dir):
        urls = [f"{BASE}/a.bin", f"{BASE}/b.bin"]
        with aioresponses() as m:
            m.get(urls[0], status=200, body=b"A")
            m.get(urls[1], status=200, body=b"B")

            async with Downloader(config=config) as downloader:
                items = await downloader.download_files(
                    urls, ["first.bin"], target_directory=download_dir
                )

        assert items[0].resolved_filename == str(download_dir / "first.bin")
        assert items[1].resolved_filename == str(download_dir / "b.bin")

    @pytest.mark.asyncio
    async def test_missing_target_directory(self, config, tmp_path):
        target = tmp_path / "not-created"
        with aioresponses() as m:
            m.get(f"{BASE}/x.bin", status=200, body=b"x")

            async with Downloader(config=config) as downloader:
                items = await downloader.download_files([f"{BASE}/x.bin"], target_directory=target)

        assert isinstance(items[0].error, StorageError)
        assert not target.exists()

    @pytest.mark.asyncio
    async def test_invalid_url_is_item_error(self, config, download_dir):
        with aioresponses() as m:
            m.get(f"{BASE}/ok.bin", status=200, body=b"ok")

            async with Downloader(config=config) as downloader:
                items = await downloader.download_files(
                    ["http://files.test/", f"{BASE}/ok.bin"], target_directory=download_dir
                )

        assert isinstance(items[0].error, ValidationError)
        assert items[1].success

    @pytest.mark.asyncio
    async def test_empty_url_list(self, config):
        async with Downloader(config=config) as downloader:
            assert await downloader.download_files([]) == []

    @pytest.mark.asyncio
    async def test_invalid_width(self, config):
        async with Downloader(config=config) as downloader:
            with pytest.raises(ValidationError):
                await downloader.download_files([f"{BASE}/a.bin"], width=0)


class TestConvenienceFunctions:
    """测试便捷函数"""

    @pytest.mark.asyncio
    async def test_download_file(self, config, download_dir):
        with aioresponses() as m:
            m.get(f"{BASE}/one.bin", status=200, body=b"1")
            path = await download_file(
                f"{BASE}/one.bin", target_directory=download_dir, config=config
            )

        assert (download_dir / "one.bin").read_bytes() == b"1"
        assert path == str(download_dir / "one.bin")

    @pytest.mark.asyncio
    async def test_download_files(self, config, download_dir):
        with aioresponses() as m:
            m.get(f"{BASE}/one.bin", status=200, body=b"1")
            m.get(f"{BASE}/two.bin", status=200, body=b"2")
            items = await download_files(
                [f"{BASE}/one.bin", f"{BASE}/two.bin"],
                target_directory=download_dir,
                config=config,
            )

        assert all(item.success for item in items)

    def test_download_files_sync_outside_event_loop(self, config, download_dir):
        with aioresponses() as m:
            m.get(f"{BASE}/sync.bin", status=200, body=b"sync")
            items = download_files_sync(
                [f"{BASE}/sync.bin"], target_directory=download_dir, config=config
            )

        assert items[0].success
        assert (download_dir / "sync.bin").read_bytes() == b"sync"
