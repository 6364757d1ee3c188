"""
Shared plumbing for the query and mutation builders.

Every builder is synchronous underneath. `execute()` runs it explicitly;
`await builder` wraps the same call in a coroutine for async call sites.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable

from localbase.db.codec import RowCodec
from localbase.db.relations import RelationExpander
from localbase.db.response import APIResponse
from localbase.db.store import Store


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class BuilderContext:
    """What a builder needs to run: the store, the codec and a clock."""

    store: Store
    codec: RowCodec = field(default_factory=RowCodec)
    clock: Callable[[], datetime] = utc_now
    expander: RelationExpander = field(init=False)

    def __post_init__(self):
        self.expander = RelationExpander(self.store, self.codec)

    def timestamp(self) -> str:
        return self.clock().isoformat()


class AwaitableBuilder:
    """Base for builders: explicit execute() plus await support."""

    def execute(self) -> APIResponse:
        raise NotImplementedError

    async def _execute_async(self) -> APIResponse:
        return self.execute()

    def __await__(self):
        return self._execute_async().__await__()
