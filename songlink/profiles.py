"""Browser fingerprint profiles for the outbound Songlink request.

Each profile keeps its header values consistent with the browser named by
its User-Agent; fields are never mixed across profiles.
"""

import random
from typing import Protocol

from songlink.models import RequestProfile


class RandomSource(Protocol):
    def choice(self, seq): ...


_CHROME_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,image/apng,*/*;q=0.8,application/signed-exchange;v=b3;q=0.7"
_FIREFOX_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8"
_SAFARI_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"

PROFILES: tuple[RequestProfile, ...] = (
    RequestProfile(
        user_agent="Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
        accept=_CHROME_ACCEPT,
        accept_language="en-US,en;q=0.9",
        accept_encoding="gzip, deflate, br",
        connection="keep-alive",
        dnt="1",
    ),
    RequestProfile(
        user_agent="Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
        accept=_CHROME_ACCEPT,
        accept_language="en-US,en;q=0.9",
        accept_encoding="gzip, deflate, br",
        connection="keep-alive",
        dnt="0",
    ),
    RequestProfile(
        user_agent="Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/123.0.0.0 Safari/537.36",
        accept=_CHROME_ACCEPT,
        accept_language="en-GB,en;q=0.9,en-US;q=0.8",
        accept_encoding="gzip, deflate, br",
        connection="keep-alive",
        dnt="1",
    ),
    RequestProfile(
        user_agent="Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:125.0) Gecko/20100101 Firefox/125.0",
        accept=_FIREFOX_ACCEPT,
        accept_language="en-US,en;q=0.5",
        accept_encoding="gzip, deflate, br",
        connection="keep-alive",
        dnt="1",
    ),
    RequestProfile(
        user_agent="Mozilla/5.0 (Macintosh; Intel Mac OS X 14.4; rv:125.0) Gecko/20100101 Firefox/125.0",
        accept=_FIREFOX_ACCEPT,
        accept_language="en-US,en;q=0.5",
        accept_encoding="gzip, deflate, br",
        connection="keep-alive",
        dnt="1",
    ),
    RequestProfile(
        user_agent="Mozilla/5.0 (X11; Ubuntu; Linux x86_64; rv:124.0) Gecko/20100101 Firefox/124.0",
        accept=_FIREFOX_ACCEPT,
        accept_language="de-DE,de;q=0.8,en-US;q=0.5,en;q=0.3",
        accept_encoding="gzip, deflate, br",
        connection="keep-alive",
        dnt="1",
    ),
    RequestProfile(
        user_agent="Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.4.1 Safari/605.1.15",
        accept=_SAFARI_ACCEPT,
        accept_language="en-US,en;q=0.9",
        accept_encoding="gzip, deflate, br",
        connection="keep-alive",
        dnt="0",
    ),
    RequestProfile(
        user_agent="Mozilla/5.0 (iPhone; CPU iPhone OS 17_4_1 like Mac OS X) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.4.1 Mobile/15E148 Safari/604.1",
        accept=_SAFARI_ACCEPT,
        accept_language="en-US,en;q=0.9",
        accept_encoding="gzip, deflate, br",
        connection="keep-alive",
        dnt="0",
    ),
    RequestProfile(
        user_agent="Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36 Edg/124.0.0.0",
        accept=_CHROME_ACCEPT,
        accept_language="en-US,en;q=0.9",
        accept_encoding="gzip, deflate, br",
        connection="keep-alive",
        dnt="1",
    ),
    RequestProfile(
        user_agent="Mozilla/5.0 (Linux; Android 14; Pixel 8) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Mobile Safari/537.36",
        accept=_CHROME_ACCEPT,
        accept_language="en-US,en;q=0.9",
        accept_encoding="gzip, deflate, br",
        connection="keep-alive",
        dnt="0",
    ),
    RequestProfile(
        user_agent="Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36 OPR/110.0.0.0",
        accept=_CHROME_ACCEPT,
        accept_language="fr-FR,fr;q=0.9,en-US;q=0.8,en;q=0.7",
        accept_encoding="gzip, deflate, br",
        connection="keep-alive",
        dnt="1",
    ),
    RequestProfile(
        user_agent="Mozilla/5.0 (iPad; CPU OS 17_4 like Mac OS X) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.4 Mobile/15E148 Safari/604.1",
        accept=_SAFARI_ACCEPT,
        accept_language="en-AU,en;q=0.9",
        accept_encoding="gzip, deflate, br",
        connection="keep-alive",
        dnt="0",
    ),
)

_system_random = random.SystemRandom()


def draw_profile(rng: RandomSource | None = None) -> RequestProfile:
    """Pick one profile uniformly at random.

    Args:
        rng: Random source exposing ``choice``. Defaults to the OS-backed source.
    """
    return (rng or _system_random).choice(PROFILES)
