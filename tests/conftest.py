"""pytest配置文件"""

import pytest

from promised.models import Config

from .utils.mock_http import MockResponse

MASTER_PLAYLIST = """#EXTM3U
#EXT-X-STREAM-INF:BANDWIDTH=1280000,RESOLUTION=640x360
mid/index.m3u8
#EXT-X-STREAM-INF:BANDWIDTH=256000,RESOLUTION=320x180
low/index.m3u8
#EXT-X-STREAM-INF:BANDWIDTH=2560000,RESOLUTION=1280x720
high/index.m3u8
"""

MEDIA_PLAYLIST = """#EXTM3U
#EXT-X-VERSION:3
#EXT-X-TARGETDURATION:10
#EXT-X-MEDIA-SEQUENCE:0
#EXTINF:10.0,
segment0.ts
#EXTINF:10.0,
segment1.ts
#EXT-X-ENDLIST
"""


@pytest.fixture
def config():
    """不重试、不等待的测试配置"""
    return Config(download_max_attempts=0, download_retry_delay=0.0)


@pytest.fixture
def retry_config():
    """默认重试次数、零间隔的测试配置"""
    return Config(download_retry_delay=0.0)


@pytest.fixture
def mock_response():
    """MockResponse 工厂"""
    return MockResponse


@pytest.fixture
def download_dir(tmp_path):
    """临时下载目录"""
    directory = tmp_path / "downloads"
    directory.mkdir()
    return directory


@pytest.fixture
def master_playlist():
    return MASTER_PLAYLIST


@pytest.fixture
def media_playlist():
    return MEDIA_PLAYLIST
