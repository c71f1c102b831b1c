import os

import pytest

from reelstack.assembler import assemble
from reelstack.models import NetworkContext


@pytest.fixture
def network():
    return NetworkContext("vpc-0abc1234")


@pytest.fixture
def graph(network):
    return assemble("prod", network)


@pytest.fixture
def isolated_env(tmp_path, monkeypatch):
    """Run with an empty home, an empty working directory and no REELSTACK_* variables."""
    home = tmp_path / "home"
    work = tmp_path / "work"
    home.mkdir()
    work.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(work)
    for key in list(os.environ):
        if key.startswith("REELSTACK_"):
            monkeypatch.delenv(key)
    return work
