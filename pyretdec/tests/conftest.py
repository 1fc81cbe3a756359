"""Shared fixtures for the pyretdec tests.

This module provides:
- config: ServiceConfig pointing at a fake API URL
- api: respx router intercepting every request made to that URL
- sleeps: list recording the delays requested by polling loops
- decompiler / fileinfo: services wired to the fake URL and fake sleep
"""

import pytest
import respx

from pyretdec import Decompiler, Fileinfo, InputFile, ServiceConfig

API_URL = "https://retdec.test/service/api"


@pytest.fixture
def config():
    return ServiceConfig(api_key="abc123", api_url=API_URL)


@pytest.fixture
def api():
    """Mock the retdec.com API; unmatched requests fail the test."""
    with respx.mock(base_url=API_URL, assert_all_called=False) as respx_mock:
        yield respx_mock


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def decompiler(config, sleeps):
    with Decompiler(config, sleep=sleeps.append) as d:
        yield d


@pytest.fixture
def fileinfo(config, sleeps):
    with Fileinfo(config, sleep=sleeps.append) as f:
        yield f


@pytest.fixture
def sample():
    """A 10-byte input file."""
    return InputFile.from_content(b"MZ\x90\x00\x03\x00\x00\x00\x04\x00", name="a.exe")
