import logging

import requests

logger = logging.getLogger(__name__)


class RemoteError(RuntimeError):
    """A call to the sheet endpoint failed; local state is left untouched."""


class SheetClient:
    """REST client for the spreadsheet-backed catalog/history endpoint.

    ``session`` may be any object with requests-style ``get``/``post``
    methods; it defaults to the ``requests`` module itself.
    """

    def __init__(self, base_url: str, timeout: float = 15.0, session=None) -> None:
        self.base_url = base_url
        self.timeout = timeout
        self.session = session or requests

    def _get_json(self, params: dict | None = None) -> list:
        try:
            resp = self.session.get(self.base_url, params=params, timeout=self.timeout)
            resp.raise_for_status()
            data = resp.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning("GET %s failed: %s", self.base_url, e)
            raise RemoteError(str(e)) from e
        if not isinstance(data, list):
            raise RemoteError(f"expected a JSON array, got {type(data).__name__}")
        return data

    def fetch_catalog(self) -> list[dict]:
        return self._get_json()

    def fetch_history(self) -> list[dict]:
        return self._get_json(params={"type": "history"})

    def push_day(self, date: str, content: str) -> str:
        """Upsert one day line; returns the endpoint's confirmation text."""
        try:
            resp = self.session.post(
                self.base_url,
                json={"date": date, "content": content},
                timeout=self.timeout,
            )
            resp.raise_for_status()
        except requests.RequestException as e:
            logger.warning("POST %s for %s failed: %s", self.base_url, date, e)
            raise RemoteError(str(e)) from e
        text = resp.text.strip()
        if not text.startswith("SUCCESS"):
            logger.warning("Write for %s rejected: %s", date, text)
            raise RemoteError(text or "empty response")
        logger.info("Pushed %s: %s", date, text)
        return text
