"""JWT and cookie helpers exposed to UI test scripts as ``utils``."""

from __future__ import annotations

import base64
import binascii
import json
import logging
import re
import time
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from playwright.async_api import Page

logger = logging.getLogger(__name__)

COMMON_TOKEN_KEYS = ["token", "authToken", "accessToken", "jwt", "auth_token", "access_token"]
_TOKEN_COOKIE_HINTS = ("auth", "token", "jwt")
_BEARER_PREFIX = re.compile(r"^Bearer\s+", re.IGNORECASE)


@dataclass
class ParsedCookie:
    """Cookie as seen by the browser context."""
    name: str
    value: str
    domain: Optional[str] = None
    path: Optional[str] = None
    expires: Optional[datetime] = None
    http_only: bool = False
    secure: bool = False
    same_site: Optional[str] = None


class UITestUtils:
    """Static helpers for inspecting session credentials."""

    @staticmethod
    def decode_jwt(token: str) -> Optional[dict[str, Any]]:
        """Decode the payload of a JWT without verifying its signature.

        Args:
            token: Raw token, optionally prefixed with ``Bearer``

        Returns:
            Claims dict, or None if the token is malformed
        """
        clean_token = _BEARER_PREFIX.sub("", token or "")
        parts = clean_token.split(".")
        if len(parts) != 3:
            return None

        payload = parts[1]
        padded = payload + "=" * ((4 - len(payload) % 4) % 4)

        try:
            decoded = base64.urlsafe_b64decode(padded.encode("ascii"))
            claims = json.loads(decoded)
        except (binascii.Error, UnicodeError, ValueError) as e:
            logger.debug(f"Failed to decode JWT: {e}")
            return None

        return claims if isinstance(claims, dict) else None

    @staticmethod
    def is_jwt_valid(token: str, now: Optional[float] = None) -> bool:
        """Check that a JWT carries an ``exp`` claim in the future."""
        claims = UITestUtils.decode_jwt(token)
        if not claims or not isinstance(claims.get("exp"), (int, float)):
            return False

        current = int(now if now is not None else time.time())
        return claims["exp"] > current

    @staticmethod
    async def get_cookies(page: "Page") -> list[ParsedCookie]:
        """List cookies of the page's browser context."""
        cookies = await page.context.cookies()
        parsed = []
        for cookie in cookies:
            expires = cookie.get("expires")
            parsed.append(ParsedCookie(
                name=cookie["name"],
                value=cookie["value"],
                domain=cookie.get("domain"),
                path=cookie.get("path"),
                expires=datetime.fromtimestamp(expires) if expires and expires > 0 else None,
                http_only=bool(cookie.get("httpOnly", False)),
                secure=bool(cookie.get("secure", False)),
                same_site=cookie.get("sameSite"),
            ))
        return parsed

    @staticmethod
    async def get_cookie(page: "Page", name: str) -> Optional[ParsedCookie]:
        """Get a cookie by name."""
        for cookie in await UITestUtils.get_cookies(page):
            if cookie.name == name:
                return cookie
        return None

    @staticmethod
    async def extract_jwt(page: "Page", storage_key: Optional[str] = None) -> Optional[str]:
        """Find a token in web storage or cookies.

        Looks at ``storage_key`` in localStorage first, then the common token
        keys in localStorage and sessionStorage, then any cookie whose name
        mentions auth, token or jwt.
        """
        if storage_key:
            token = await page.evaluate("(key) => localStorage.getItem(key)", storage_key)
            if token:
                return token

        for key in COMMON_TOKEN_KEYS:
            token = await page.evaluate(
                "(key) => localStorage.getItem(key) || sessionStorage.getItem(key)", key
            )
            if token:
                return token

        for cookie in await UITestUtils.get_cookies(page):
            lowered = cookie.name.lower()
            if any(hint in lowered for hint in _TOKEN_COOKIE_HINTS):
                return cookie.value

        return None
