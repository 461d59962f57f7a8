"""HTTP response helpers for HTMX handlers: flash redirects, toasts and admin checks."""

from __future__ import annotations

import html
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple
from urllib.parse import quote_plus, unquote_plus

__all__ = [
    "Cookie",
    "Response",
    "FLASH_COOKIE",
    "FLASH_MAX_AGE",
    "ADMIN_REQUIRED_MESSAGE",
    "decode_flash",
    "redirect_with_flash",
    "render_toast",
    "require_admin",
]

FLASH_COOKIE = "flash"
FLASH_MAX_AGE = 30
ADMIN_REQUIRED_MESSAGE = "Accès refusé : droits administrateur requis"
_HTML_CONTENT_TYPE = "text/html; charset=utf-8"


@dataclass
class Cookie:
    """A cookie to send with a response."""

    name: str
    value: str
    path: str = "/"
    max_age: Optional[int] = None
    http_only: bool = False
    same_site: Optional[str] = None

    def header_value(self) -> str:
        """Render the cookie as the value of a Set-Cookie header."""
        parts = [f"{self.name}={self.value}"]
        if self.path:
            parts.append(f"Path={self.path}")
        if self.max_age is not None:
            parts.append(f"Max-Age={self.max_age}")
        if self.http_only:
            parts.append("HttpOnly")
        if self.same_site:
            parts.append(f"SameSite={self.same_site}")
        return "; ".join(parts)


@dataclass
class Response:
    """An HTTP response being built by a handler.

    The status can be set once; later attempts are ignored, as they are once
    the headers have gone out on the wire.
    """

    status: int = 200
    headers: Dict[str, str] = field(default_factory=dict)
    cookies: Dict[str, Cookie] = field(default_factory=dict)
    body: str = ""
    _status_written: bool = field(default=False, repr=False, compare=False)

    def write_header(self, status: int) -> None:
        if not self._status_written:
            self.status = status
            self._status_written = True

    def write(self, text: str) -> None:
        self._status_written = True
        self.body += text

    def set_cookie(self, cookie: Cookie) -> None:
        self.cookies[cookie.name] = cookie

    def header_items(self) -> List[Tuple[str, str]]:
        """All headers, with one Set-Cookie entry per cookie."""
        items = list(self.headers.items())
        items.extend(("Set-Cookie", c.header_value()) for c in self.cookies.values())
        return items


def decode_flash(value: str) -> Tuple[str, str]:
    """Split an encoded flash cookie value into its level and message."""
    level, _, message = unquote_plus(value).partition("|")
    return level, message


def redirect_with_flash(response: Response, redirect_url: str, level: str, message: str) -> None:
    """Ask HTMX to redirect and leave a flash message for the next page load.

    The cookie stays readable by scripts so the page can show it as a toast.
    """
    response.set_cookie(
        Cookie(
            name=FLASH_COOKIE,
            value=quote_plus(f"{level}|{message}", safe=""),
            path="/",
            max_age=FLASH_MAX_AGE,
            http_only=False,
            same_site="Lax",
        )
    )
    response.headers["HX-Redirect"] = redirect_url


def render_toast(response: Response, level: str, message: str) -> None:
    """Write a toast fragment with the given level and message."""
    response.headers.setdefault("Content-Type", _HTML_CONTENT_TYPE)
    response.write(
        f'<div class="toast toast-{html.escape(level, quote=True)}" '
        f'data-level="{html.escape(level, quote=True)}">'
        f"{html.escape(message)}</div>"
    )


def require_admin(response: Response, is_admin: bool) -> bool:
    """Return True for an admin; otherwise answer 403 with an error toast and return False."""
    if is_admin:
        return True
    response.write_header(403)
    render_toast(response, "error", ADMIN_REQUIRED_MESSAGE)
    return False