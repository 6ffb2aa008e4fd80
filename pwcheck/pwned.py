import hashlib
import logging
import time
from collections import OrderedDict
from typing import Any, Callable, Dict, FrozenSet, Literal, Optional, Tuple

import httpx

from pwcheck import settings
from pwcheck.weaklists import COMMON_PASSWORDS, is_common

logger = logging.getLogger(__name__)

LeakVerdict = Literal["unknown", "not_found", "found"]
UNKNOWN: LeakVerdict = "unknown"
NOT_FOUND: LeakVerdict = "not_found"
FOUND: LeakVerdict = "found"


def sha1_split(password: str) -> Tuple[str, str]:
    # SHA1, upper-case hex: 5-char prefix goes on the wire, 35-char suffix stays local
    sha = hashlib.sha1(password.encode("utf-8")).hexdigest().upper()
    return sha[:5], sha[5:]


def parse_range(body: str) -> Dict[str, int]:
    """Parse a range response into {suffix: count}.

    Records are ``SUFFIX:COUNT`` one per line; a bare suffix counts as 1.
    Raises ValueError on a record whose count is not an integer.
    """
    out: Dict[str, int] = {}
    for line in body.splitlines():
        line = line.strip()
        if not line:
            continue
        sfx, sep, count = line.partition(":")
        out[sfx.strip().upper()] = int(count) if sep else 1
    return out


async def _fetch_range(prefix: str, client: Optional[httpx.AsyncClient], url: str) -> str:
    headers = {"Add-Padding": "true", "user-agent": settings.USER_AGENT}
    if client is not None:
        r = await client.get(url.format(prefix=prefix), headers=headers)
        r.raise_for_status()
        return r.text
    async with httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SEC) as c:
        r = await c.get(url.format(prefix=prefix), headers=headers)
        r.raise_for_status()
        return r.text


async def pwned_password_count(password: str, client: Optional[httpx.AsyncClient] = None) -> int:
    """How many times the range API has seen ``password``. Errors propagate."""
    prefix, suffix = sha1_split(password)
    body = await _fetch_range(prefix, client, settings.RANGE_URL)
    return parse_range(body).get(suffix, 0)


class LeakOracle:
    """Decides whether a password is known to be compromised.

    A local exact-match list is consulted first; everything else goes
    through the k-anonymity range lookup. Only the 5-character digest
    prefix leaves the process. Range bodies are cached per prefix, never
    per password, in a bounded LRU whose expired entries are dropped on
    every store.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        *,
        range_url: str = settings.RANGE_URL,
        cache_ttl: int = settings.RANGE_CACHE_TTL_SEC,
        cache_max_entries: int = settings.RANGE_CACHE_MAX_ENTRIES,
        common_passwords: FrozenSet[str] = COMMON_PASSWORDS,
        max_length: int = settings.MAX_CHECK_LENGTH,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.client = client
        self.range_url = range_url
        self.cache_ttl = cache_ttl
        self.cache_max_entries = cache_max_entries
        self.common_passwords = common_passwords
        self.max_length = max_length
        self.clock = clock
        self._cache: "OrderedDict[str, Tuple[float, str]]" = OrderedDict()  # prefix -> (expires, text)

    @property
    def cache_size(self) -> int:
        return len(self._cache)

    async def is_compromised(self, password: Any) -> LeakVerdict:
        if not isinstance(password, str) or not password:
            return NOT_FOUND
        if len(password) > self.max_length:
            return NOT_FOUND
        if is_common(password, self.common_passwords):
            return FOUND
        try:
            prefix, suffix = sha1_split(password)
        except UnicodeEncodeError:
            # lone surrogates have no UTF-8 form, so no corpus can hold them
            return NOT_FOUND

        try:
            body = await self._range(prefix)
            count = parse_range(body).get(suffix, 0)
        except (httpx.HTTPError, ValueError, UnicodeDecodeError) as e:
            logger.debug("range lookup for %s failed: %s", prefix, type(e).__name__)
            return UNKNOWN
        except Exception as e:
            logger.warning("range lookup for %s failed unexpectedly: %s", prefix, type(e).__name__)
            return UNKNOWN
        # count 0 rows are Add-Padding filler
        return FOUND if count > 0 else NOT_FOUND

    async def _range(self, prefix: str) -> str:
        hit = self._cache.get(prefix)
        if hit and hit[0] > self.clock():
            self._cache.move_to_end(prefix)
            return hit[1]
        body = await _fetch_range(prefix, self.client, self.range_url)
        if self.cache_ttl > 0 and self.cache_max_entries > 0:
            self._store(prefix, body)
        return body

    def _store(self, prefix: str, body: str) -> None:
        now = self.clock()
        for key in [k for k, (expires, _) in self._cache.items() if expires <= now]:
            del self._cache[key]
        self._cache[prefix] = (now + self.cache_ttl, body)
        self._cache.move_to_end(prefix)
        while len(self._cache) > self.cache_max_entries:
            self._cache.popitem(last=False)

    def clear_cache(self) -> None:
        self._cache.clear()
