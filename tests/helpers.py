from types import SimpleNamespace

from starlette.requests import Request


class SequenceRandom:
    """Deterministic stand-in for random.Random.randint."""

    def __init__(self, values):
        self.values = list(values)
        self.calls = 0

    def randint(self, a, b):
        value = self.values[self.calls % len(self.values)]
        self.calls += 1
        return value


def make_request(app=None, headers=None, path="/api/v1/test"):
    scope = {
        "type": "http",
        "method": "GET",
        "scheme": "http",
        "server": ("testserver", 80),
        "path": path,
        "root_path": "",
        "query_string": b"",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "app": app or SimpleNamespace(state=SimpleNamespace()),
    }
    return Request(scope)
