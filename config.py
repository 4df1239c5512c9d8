import logging
import os
from typing import Any, Optional

import keyring
from keyring.errors import PasswordDeleteError
import yaml

APP_VERSION = "1.0.0"

logger = logging.getLogger(__name__)


class YamlConfig:
    """Settings file for the log; the endpoint URL can live in the OS keyring.

    With ``ENCRYPT_SETTINGS=1`` sensitive keys are written to the keyring and
    the YAML file only records ``true`` in their place.
    """

    SENSITIVE_KEYS = {"endpoint_url"}

    def __init__(self, path: str = "settings.yaml") -> None:
        self.path = path
        self.encrypt = os.environ.get("ENCRYPT_SETTINGS") == "1"
        self.service = "rehabflow"

    def _read(self) -> dict:
        if not os.path.exists(self.path):
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}

    def load(self) -> dict:
        data = self._read()
        if self.encrypt:
            for key in self.SENSITIVE_KEYS & set(data):
                secret = keyring.get_password(self.service, key)
                if secret is None:
                    logger.warning("No keyring secret for %s, ignoring it", key)
                    data.pop(key)
                else:
                    data[key] = secret
        return data

    def save(self, data: dict) -> None:
        out = dict(data)
        if self.encrypt:
            for key in self.SENSITIVE_KEYS & set(out):
                keyring.set_password(self.service, key, str(out[key]))
                out[key] = True
        with open(self.path, "w", encoding="utf-8") as f:
            yaml.safe_dump(out, f, allow_unicode=True)

    def update(self, values: dict[str, Optional[Any]]) -> dict:
        """Merge ``values`` into the stored settings and write them back.

        A value of ``""`` removes the key; ``None`` leaves it unchanged.
        Returns the merged settings with secrets resolved.
        """
        data = self.load()
        for key, value in values.items():
            if value is None:
                continue
            if value == "":
                data.pop(key, None)
                if self.encrypt and key in self.SENSITIVE_KEYS:
                    try:
                        keyring.delete_password(self.service, key)
                    except PasswordDeleteError:
                        logger.info("No keyring secret stored for %s", key)
            else:
                data[key] = value
        self.save(data)
        return data
