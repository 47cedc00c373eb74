from .api import delete, get, get_json, post, post_json, put, request, request_json, upload
from .errors import DecodeError, FetchError, TransportError
from .http.client.fetcher import Fetcher
from .http.client.options import Options
from .http.client.response import Response
from .util.logging import configure_logging

__all__ = [
    'request',
    'get',
    'delete',
    'post',
    'put',
    'upload',
    'request_json',
    'get_json',
    'post_json',
    'Fetcher',
    'Options',
    'Response',
    'FetchError',
    'TransportError',
    'DecodeError',
    'configure_logging',
]
