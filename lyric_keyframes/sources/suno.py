from __future__ import annotations

import logging
from typing import Any

import requests

from .base import AlignedSource, FetchResult

logger = logging.getLogger(__name__)

SESSION_COOKIE = "__session"


class SunoAlignedSource(AlignedSource):
    """
    Word-aligned lyrics from the Suno studio API.

    The first request goes out without cookies. If it fails, one more request
    is made on a session carrying the `__session` cookie. No further retries.
    """

    name = "suno"

    def __init__(self, *, api_base: str, session_token: str | None, timeout_s: float = 10.0):
        self.api_base = api_base.rstrip("/")
        self.session_token = session_token
        self.timeout_s = timeout_s

    def url_for(self, song_id: str) -> str:
        return f"{self.api_base}/api/gen/{requests.utils.quote(song_id)}/aligned_lyrics/v2/"

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.session_token}", "Accept": "application/json"}

    def fetch(self, song_id: str) -> FetchResult:
        if not self.session_token:
            logger.warning("No session token configured, cannot query %s", self.name)
            return FetchResult(None, False, self.name)

        url = self.url_for(song_id)
        try:
            r = requests.get(url, headers=self._headers(), timeout=self.timeout_s)
            if r.status_code == 404:
                return FetchResult(None, True, self.name)
            r.raise_for_status()
            return self._result(r.json())
        except (requests.RequestException, ValueError) as e:
            logger.info("Primary request for %s failed (%s), trying session transport", song_id, e)

        return self._fetch_with_session(url)

    def _fetch_with_session(self, url: str) -> FetchResult:
        with requests.Session() as s:
            s.cookies.set(SESSION_COOKIE, self.session_token or "")
            try:
                r = s.get(url, headers=self._headers(), timeout=self.timeout_s)
                if r.status_code == 404:
                    return FetchResult(None, True, self.name)
                r.raise_for_status()
                return self._result(r.json())
            except (requests.RequestException, ValueError) as e:
                logger.warning("%s error: %s", self.name, e)
                return FetchResult(None, False, self.name)

    def _result(self, data: Any) -> FetchResult:
        if not isinstance(data, dict) or not data:
            return FetchResult(None, True, self.name)
        return FetchResult(data, False, self.name)
