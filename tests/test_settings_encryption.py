import os
import sys
import unittest
import keyring
import yaml
sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from config import YamlConfig
from db import SettingsRepository
from insight_service import InsightService

class DummyKeyring(keyring.backend.KeyringBackend):
    priority = 1
    def __init__(self):
        self.store = {}
    def get_password(self, service, username):
        return self.store.get((service, username))
    def set_password(self, service, username, password):
        self.store[(service, username)] = password
    def delete_password(self, service, username):
        self.store.pop((service, username), None)

class SettingsEncryptionTest(unittest.TestCase):
    def setUp(self) -> None:
        self.keyring = DummyKeyring()
        keyring.set_keyring(self.keyring)
        os.environ['ENCRYPT_SETTINGS'] = '1'
        self.path = 'enc_settings.yaml'
        self.db_path = 'enc_settings.db'
        for path in (self.path, self.db_path):
            if os.path.exists(path):
                os.remove(path)

    def tearDown(self) -> None:
        for path in (self.path, self.db_path):
            if os.path.exists(path):
                os.remove(path)
        os.environ.pop('ENCRYPT_SETTINGS', None)

    def test_encrypt_and_load(self) -> None:
        cfg = YamlConfig(self.path)
        cfg.save({'llm_api_key': 'secret', 'weight_unit': 'lbs'})
        with open(self.path, 'r', encoding='utf-8') as f:
            raw = yaml.safe_load(f)
        self.assertIs(raw['llm_api_key'], True)
        self.assertEqual(self.keyring.store[('strengthbalance', 'llm_api_key')], 'secret')
        data = cfg.load()
        self.assertEqual(data['llm_api_key'], 'secret')
        self.assertEqual(data['weight_unit'], 'lbs')

    def test_missing_secret_dropped(self) -> None:
        with open(self.path, 'w', encoding='utf-8') as f:
            yaml.safe_dump({'llm_api_key': True}, f)
        self.assertEqual(YamlConfig(self.path).load(), {})

    def test_placeholder_ignored_without_encryption(self) -> None:
        with open(self.path, 'w', encoding='utf-8') as f:
            yaml.safe_dump({'llm_api_key': True, 'weight_unit': 'kg'}, f)
        self.assertEqual(YamlConfig(self.path, encrypt=False).load(), {'weight_unit': 'kg'})
        cfg = YamlConfig(self.path, encrypt=False)
        cfg.save({'llm_api_key': 'plain'})
        self.assertEqual(cfg.load(), {'llm_api_key': 'plain'})
        self.assertEqual(self.keyring.store, {})

    def test_api_key_reaches_insights(self) -> None:
        settings = SettingsRepository(self.db_path, self.path)
        settings.set_text('llm_api_key', 'secret')
        settings.set_text('llm_endpoint', 'http://localhost:9000/generate')
        service = InsightService.from_settings(settings)
        self.assertEqual(service.api_key, 'secret')
        self.assertEqual(service.endpoint, 'http://localhost:9000/generate')

if __name__ == '__main__':
    unittest.main()
