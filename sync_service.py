import logging
import os
from typing import Optional

from catalog import ExerciseCatalog
from client import RemoteError, SheetClient
from codec import decode_row, encode_group
from db import LogRepository
from settings_schema import SettingsSchema
from store import LogStore

logger = logging.getLogger(__name__)


def load_catalog(client: Optional[SheetClient]) -> ExerciseCatalog:
    """Fetch the catalog; an unreachable endpoint yields an empty catalog."""
    if client is None:
        return ExerciseCatalog()
    try:
        return ExerciseCatalog.from_rows(client.fetch_catalog())
    except RemoteError as e:
        logger.warning("Catalog unavailable, continuing with an empty one: %s", e)
        return ExerciseCatalog()


def resolve_catalog(
    client: Optional[SheetClient], catalog_path: str = ""
) -> ExerciseCatalog:
    """Remote catalog first, then the local YAML list when the remote is empty."""
    catalog = load_catalog(client)
    if catalog.is_empty and catalog_path and os.path.exists(catalog_path):
        catalog = ExerciseCatalog.from_yaml(catalog_path)
    return catalog


def open_client(settings: SettingsSchema) -> Optional[SheetClient]:
    if not settings.endpoint_url:
        return None
    return SheetClient(settings.endpoint_url, timeout=settings.timeout)


def open_store(
    settings: SettingsSchema, catalog: Optional[ExerciseCatalog] = None
) -> LogStore:
    if catalog is None:
        catalog = resolve_catalog(open_client(settings), settings.catalog_path)
    return LogStore(LogRepository(settings.db_path, settings.scope), catalog)


class SyncService:
    """Moves day lines between the local store and the sheet endpoint.

    Each call is a single request; failures propagate as ``RemoteError``
    before any local state is touched.
    """

    def __init__(self, client: SheetClient, store: LogStore) -> None:
        self.client = client
        self.store = store

    def refresh_catalog(self) -> ExerciseCatalog:
        catalog = load_catalog(self.client)
        if not catalog.is_empty:
            self.store.set_catalog(catalog)
        return self.store.catalog

    def push_day(self, date: str) -> str:
        group = self.store.day_group(date)
        return self.client.push_day(date, encode_group(group))

    def push_all(self) -> list[str]:
        """Push every local day, stopping at the first failure."""
        return [self.push_day(date) for date in self.store.dates()]

    def restore(self) -> int:
        """Replace local days with the endpoint's history; return entries restored."""
        rows = self.client.fetch_history()
        groups = [decode_row(row, self.store.catalog) for row in rows]
        count = self.store.merge_remote(groups)
        logger.info("Restored %d entries across %d days", count, len(groups))
        return count
