"""Cookie header parsing and ``Set-Cookie`` serialization.

The read side feeds ``Request.cookies``; the write side is what the
session store attaches to every response, streamed or not.
"""

from dataclasses import dataclass


def parse_cookies(header: str) -> dict[str, str]:
    """Split a ``Cookie`` header into a name -> value dict.

    Later duplicates win. Pairs without ``=`` are ignored.
    """
    cookies: dict[str, str] = {}
    for pair in header.split(";"):
        name, sep, value = pair.strip().partition("=")
        if sep and name.strip():
            cookies[name.strip()] = value.strip().strip('"')
    return cookies


@dataclass(frozen=True, slots=True)
class SetCookie:
    """One ``Set-Cookie`` directive."""

    name: str
    value: str
    max_age: int | None = None
    path: str = "/"
    secure: bool = False
    httponly: bool = True
    samesite: str = "lax"

    def to_header_value(self) -> str:
        """Serialize to the header value (without the ``Set-Cookie:`` name)."""
        parts = [f"{self.name}={self.value}"]
        if self.max_age is not None:
            parts.append(f"Max-Age={self.max_age}")
        if self.path:
            parts.append(f"Path={self.path}")
        if self.secure:
            parts.append("Secure")
        if self.httponly:
            parts.append("HttpOnly")
        if self.samesite:
            parts.append(f"SameSite={self.samesite.capitalize()}")
        return "; ".join(parts)

    def header(self) -> tuple[str, str]:
        return ("set-cookie", self.to_header_value())
