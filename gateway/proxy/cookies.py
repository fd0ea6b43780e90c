"""Set-Cookie parsing and re-scoping.

Each Set-Cookie value is parsed into a :class:`CookieAttributeSet`, rewritten
attribute by attribute, and serialized again. Working on the parsed form
keeps the rewrite independent of attribute order and idempotent.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field


@dataclass
class CookieAttributeSet:
    """One parsed Set-Cookie value.

    ``attributes`` keeps the original order and spelling; flag attributes
    (``Secure``, ``HttpOnly``) have a value of ``None``.
    """

    name: str
    value: str
    attributes: list[tuple[str, str | None]] = field(default_factory=list)

    @classmethod
    def parse(cls, header_value: str) -> "CookieAttributeSet":
        pair, *raw_attributes = header_value.split(";")
        name, sep, value = pair.partition("=")
        if not sep:
            name, value = "", name

        attributes: list[tuple[str, str | None]] = []
        for raw in raw_attributes:
            raw = raw.strip()
            if not raw:
                continue
            key, sep, attr_value = raw.partition("=")
            attributes.append((key.strip(), attr_value.strip() if sep else None))
        return cls(name=name.strip(), value=value.strip(), attributes=attributes)

    def get_all(self, key: str) -> list[str | None]:
        key = key.lower()
        return [value for attr, value in self.attributes if attr.lower() == key]

    def get(self, key: str) -> str | None:
        values = self.get_all(key)
        return values[0] if values else None

    def has(self, key: str) -> bool:
        key = key.lower()
        return any(attr.lower() == key for attr, _ in self.attributes)

    def set(self, key: str, value: str | None = None) -> None:
        """Replace every occurrence of *key* by one ``key=value`` in place, or append it."""
        lowered = key.lower()
        updated: list[tuple[str, str | None]] = []
        placed = False
        for attr, current in self.attributes:
            if attr.lower() != lowered:
                updated.append((attr, current))
            elif not placed:
                updated.append((key, value))
                placed = True
        if not placed:
            updated.append((key, value))
        self.attributes = updated

    @property
    def pair(self) -> str:
        """The ``name=value`` part sent back in a Cookie header."""
        return f"{self.name}={self.value}" if self.name else self.value

    def serialize(self) -> str:
        parts = [self.pair]
        parts.extend(key if value is None else f"{key}={value}" for key, value in self.attributes)
        return "; ".join(parts)


def registrable_domain(hostname: str) -> str:
    """Last two DNS labels of *hostname* (``check.a11yplan.de`` → ``a11yplan.de``)."""
    labels = [label for label in hostname.lower().rstrip(".").split(".") if label]
    return ".".join(labels[-2:])


def rescope_set_cookie(header_value: str, hostname: str) -> str:
    """Re-scope an origin Set-Cookie value to the public domain of *hostname*.

    The domain becomes ``.<registrable domain>``, ``secure`` is ensured and a
    cross-site ``samesite=none`` is downgraded to ``samesite=lax``.
    """
    cookie = CookieAttributeSet.parse(header_value)
    cookie.set("domain", f".{registrable_domain(hostname)}")
    if not cookie.has("secure"):
        cookie.set("secure")
    if any((v or "").lower() == "none" for v in cookie.get_all("samesite")):
        cookie.set("samesite", "lax")
    return cookie.serialize()


def cookie_header_from_set_cookies(set_cookies: Iterable[str]) -> str:
    """Reduce Set-Cookie values to a ``Cookie`` header (``a=1; b=2``)."""
    return "; ".join(CookieAttributeSet.parse(v).pair for v in set_cookies if v.strip())
