import shutil

import pytest

from tests.fakes import FULL_XML, SOX_STAT_OUTPUT, FakeRunner, tool_result


@pytest.fixture
def default_runner():
    return FakeRunner({
        "sox": tool_result(stderr=SOX_STAT_OUTPUT),
        "bs1770gain": tool_result(stdout=FULL_XML),
    })


@pytest.fixture
def audio_path(tmp_path):
    path = tmp_path / "song.wav"
    path.write_bytes(b"RIFF")
    return path


def pytest_collection_modifyitems(config, items):
    if shutil.which("sox") and shutil.which("bs1770gain"):
        return
    skip = pytest.mark.skip(reason="sox and bs1770gain are not both installed")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip)
