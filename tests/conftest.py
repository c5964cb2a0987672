from __future__ import annotations

import io

import pytest

from mmadmin.printer import Printer
from mmadmin.service import AdminService

from tests.fakes import FakeClient


@pytest.fixture()
def fake_client() -> FakeClient:
    return FakeClient()


@pytest.fixture()
def service(fake_client: FakeClient) -> AdminService:
    return AdminService(fake_client, page_size=200)


@pytest.fixture()
def printer() -> Printer:
    return Printer("plain", out=io.StringIO(), err=io.StringIO())
