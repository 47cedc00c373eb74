"""
Settings for ufetch.

These settings are global and can be read from any module in the ufetch package.
They provide the defaults that `Fetcher` and `AiohttpTransport` fall back to
when no explicit argument is given.

The SETTINGS dict structure follows the structure of ufetch submodules.

Expected usage behavior:

```python
from ufetch.settings import SETTINGS

FETCH_SETTINGS = SETTINGS.http.client.fetch
```

Once initialized, the settings are expected to be immutable (not enforced).
"""

SETTINGS = {
    'http': {
        'client': {
            'fetch': {
                # total seconds for one request/response cycle
                'timeout': 30.0,
                # one scheduler tick of the progress loop
                'poll_interval': 1 / 60,
                # download read size
                'chunk_size': 64 * 1024,
                'headers': {
                    "User-Agent": "ufetch/0.1 (+aiohttp)",
                },
            },
        },
    },
}


class AttrDict(dict):
    """
    A dictionary subclass that allows dot-notation access while
    recursively converting nested dictionaries.
    """
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        # Point the instance __dict__ to itself to allow attribute access
        self.__dict__ = self
        for key, value in self.items():
            self[key] = self._convert(value)

    @classmethod
    def _convert(cls, value):
        """Recursively converts dicts to AttrDicts, leaving other types alone."""
        if isinstance(value, dict) and not isinstance(value, cls):
            return cls(value)
        elif isinstance(value, list):
            return [cls._convert(item) for item in value]
        return value

    def __setitem__(self, key, value):
        # Values added via dict-syntax are converted too
        super().__setitem__(key, self._convert(value))

    def __getattr__(self, key):
        try:
            return self[key]
        except KeyError as exc:
            raise AttributeError(f"AttrDict object has no attribute '{key}'") from exc


SETTINGS = AttrDict(SETTINGS)
FETCH_SETTINGS = SETTINGS.http.client.fetch
