from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Tuple

_ENV_PREFIX = "MENUTREE_"


@dataclass
class MenuConfig:
    default_locale: str = "en"
    locales: Tuple[str, ...] = ("en",)
    base_path: str = "menu"
    api_base_url: str = "https://api.telegram.org"
    token: str = field(default="", repr=False)
    host: str = "127.0.0.1"
    port: int = 8080
    request_timeout_s: float = 10.0

    def __post_init__(self) -> None:
        if not self.base_path:
            raise ValueError("base_path must not be empty")
        if self.default_locale not in self.locales:
            self.locales = (self.default_locale, *self.locales)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "MenuConfig":
        """Build a config from ``MENUTREE_*`` variables.

        Unset variables keep the dataclass default. ``MENUTREE_LOCALES`` is a
        comma separated list.
        """

        env = os.environ if environ is None else environ
        kwargs: Dict[str, Any] = {}
        for f in dataclasses.fields(cls):
            raw = env.get(_ENV_PREFIX + f.name.upper())
            if raw is None:
                continue
            kwargs[f.name] = _cast(f.name, f.type, raw)
        return cls(**kwargs)


def _cast(name: str, hint: Any, raw: str) -> Any:
    hint = str(hint)
    try:
        if hint == "int":
            return int(raw)
        if hint == "float":
            return float(raw)
    except ValueError as exc:
        raise ValueError(f"{_ENV_PREFIX}{name.upper()} must be a number, got {raw!r}") from exc
    if hint.startswith("Tuple"):
        return tuple(part.strip() for part in raw.split(",") if part.strip())
    return raw
