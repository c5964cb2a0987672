from __future__ import annotations

from typing import Any

from mmadmin.errors import RemoteNotFoundError, TransportError
from mmadmin.models import Bot, User


def _freeze(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(v) for v in value)
    if isinstance(value, dict):
        return tuple(sorted((k, _freeze(v)) for k, v in value.items()))
    return value


class FakeClient:
    """Records calls and answers them from queued expectations.

    Every call must have been queued with ``expect``; an unexpected call fails
    the test immediately.
    """

    def __init__(self) -> None:
        self._expected: dict[tuple, list[tuple[Any, BaseException | None]]] = {}
        self.calls: list[tuple] = []

    def expect(self, name: str, *args: Any, returns: Any = None,
               raises: BaseException | None = None, **kwargs: Any) -> None:
        key = (name, _freeze(args), _freeze(kwargs))
        self._expected.setdefault(key, []).append((returns, raises))

    def _call(self, name: str, *args: Any, **kwargs: Any) -> Any:
        key = (name, _freeze(args), _freeze(kwargs))
        self.calls.append((name, *_freeze(args)))
        queue = self._expected.get(key)
        if not queue:
            raise AssertionError(f"unexpected call {name}{args} {kwargs}")
        returns, raises = queue.pop(0)
        if raises is not None:
            raise raises
        return returns

    def __getattr__(self, name: str):
        if name.startswith("_"):
            raise AttributeError(name)
        return lambda *args, **kwargs: self._call(name, *args, **kwargs)

    def count(self, name: str) -> int:
        return sum(1 for call in self.calls if call[0] == name)

    def assert_exhausted(self) -> None:
        leftover = {k: v for k, v in self._expected.items() if v}
        assert not leftover, f"expected calls not made: {list(leftover)}"

    def expect_bots(self, page: int, bots: list, per_page: int = 200,
                    include_deleted: bool = False, only_orphaned: bool = False,
                    raises: BaseException | None = None) -> None:
        self.expect(
            "get_bots", page, per_page,
            include_deleted=include_deleted, only_orphaned=only_orphaned,
            returns=bots, raises=raises,
        )


def not_found(message: str = "Mock Error") -> RemoteNotFoundError:
    return RemoteNotFoundError(message, status_code=404, error_id="app.user.missing_account.const")


def server_error(message: str = "Mock Error") -> TransportError:
    return TransportError(message, status_code=500)


def make_user(user_id: str, username: str | None = None) -> User:
    username = username or f"user-{user_id}"
    return User(id=user_id, username=username, email=f"{username}@example.com")


def make_bot(user_id: str, owner_id: str = "", username: str | None = None,
             delete_at: int = 0) -> Bot:
    return Bot(
        user_id=user_id,
        username=username or f"bot-{user_id}",
        display_name="some-name",
        description="some-text",
        owner_id=owner_id,
        delete_at=delete_at,
    )
