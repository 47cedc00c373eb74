from dataclasses import dataclass, field, replace
from typing import Callable, Dict, Optional

import aiohttp

ProgressCallback = Callable[[float], None]


@dataclass(frozen=True)
class Options:
    """
    Per-call request configuration. Read-only once built; the shortcut
    helpers derive copies through `with_json` / `with_form` instead of
    mutating the caller's instance.

    At most one body is sent. When several are set the first of
    form_data, json_body (non-empty), body_raw wins.
    """
    headers: Dict[str, str] = field(default_factory=dict)

    body_raw: Optional[bytes] = None
    json_body: Optional[str] = None
    form_data: Optional[aiohttp.FormData] = None

    on_download_progress: Optional[ProgressCallback] = None
    on_upload_progress: Optional[ProgressCallback] = None

    throw_on_error: bool = True
    timeout: Optional[float] = None

    def with_json(self, json_body: str) -> "Options":
        return replace(self, json_body=json_body)

    def with_form(self, form_data: aiohttp.FormData) -> "Options":
        return replace(self, form_data=form_data)

    @property
    def body_kind(self) -> str | None:
        if self.form_data is not None:
            return "form"
        if self.json_body:
            return "json"
        if self.body_raw is not None:
            return "raw"
        return None

    @property
    def has_ambiguous_body(self) -> bool:
        bodies = (self.form_data is not None, bool(self.json_body), self.body_raw is not None)
        return sum(bodies) > 1
