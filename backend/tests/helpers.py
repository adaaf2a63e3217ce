from __future__ import annotations

import json
import re

from noteserver.graphql.gateway import Transport


STATE_RE = re.compile(r"window\.__PRELOADED_STATE__ = (.*?)</script>", re.DOTALL)


def preloaded_state(html: str) -> dict:
    found = STATE_RE.search(html)
    assert found, "rendered page carries no preloaded state"
    return json.loads(found.group(1))


class StubTransport(Transport):
    """Returns a canned payload, or raises, and records what it was asked."""

    def __init__(self, payload=None, error=None):
        self.payload = payload if payload is not None else {"data": {}}
        self.error = error
        self.calls = []

    async def execute(self, query, variables, *, base_url, cookie, context):
        self.calls.append(
            {"query": query, "variables": dict(variables), "base_url": base_url, "cookie": cookie}
        )
        if self.error is not None:
            raise self.error
        return self.payload
