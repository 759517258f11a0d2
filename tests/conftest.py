import pytest

from arena_classes.config import ArenaConfig
from arena_classes.data_models.account import Account

from fakes import BASE, FakeFetcher


@pytest.fixture()
def config():
    return ArenaConfig(base_url=BASE + "/", max_list_pages=5)


@pytest.fixture()
def fetcher():
    return FakeFetcher()


@pytest.fixture()
def account():
    return Account(id="card-1", name="123456789", password="secret")
