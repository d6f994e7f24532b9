import os
import yaml
import keyring

APP_NAME = "strengthbalance"
APP_VERSION = "1.0.0"


class YamlConfig:
    """Settings file in YAML; secrets go to the system keyring when encrypted."""

    SENSITIVE_KEYS = frozenset({"llm_api_key"})
    PLACEHOLDER = True

    def __init__(
        self,
        path: str = "settings.yaml",
        service: str = APP_NAME,
        encrypt: bool | None = None,
    ) -> None:
        self.path = path
        self.service = service
        if encrypt is None:
            encrypt = os.environ.get("ENCRYPT_SETTINGS") == "1"
        self.encrypt = encrypt

    def _read_secret(self, key: str) -> str | None:
        return keyring.get_password(self.service, key)

    def _write_secret(self, key: str, value) -> None:
        keyring.set_password(self.service, key, str(value))

    def load(self) -> dict:
        if not os.path.exists(self.path):
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        for key in self.SENSITIVE_KEYS & data.keys():
            if self.encrypt:
                secret = self._read_secret(key)
                if secret is None:
                    del data[key]
                else:
                    data[key] = secret
            elif data[key] is self.PLACEHOLDER:
                # written while encrypted; the value lives in the keyring only
                del data[key]
        return data

    def save(self, data: dict) -> None:
        out = dict(data)
        if self.encrypt:
            for key in self.SENSITIVE_KEYS & out.keys():
                self._write_secret(key, out[key])
                out[key] = self.PLACEHOLDER
        with open(self.path, "w", encoding="utf-8") as f:
            yaml.safe_dump(out, f)
