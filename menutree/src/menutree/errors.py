from __future__ import annotations


class MenuError(Exception):
    pass


class ApiError(MenuError):
    """The messaging platform rejected a request."""

    def __init__(self, code: int, description: str) -> None:
        self.code = code
        self.description = description
        super().__init__(f"{code}: {description}")


class NotRenderedError(MenuError):
    def __init__(self, locale: str) -> None:
        self.locale = locale
        super().__init__(f"menu is not built for locale {locale!r}")


class UnknownNodeError(MenuError):
    pass
