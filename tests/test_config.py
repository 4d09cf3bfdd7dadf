import os
import tempfile
import unittest
from pathlib import Path


class TestConfigNetworkEnv(unittest.TestCase):
    def setUp(self) -> None:
        # Snapshot env we touch.
        self._keys = [
            "http_proxy",
            "HTTP_PROXY",
            "https_proxy",
            "HTTPS_PROXY",
            "no_proxy",
            "NO_PROXY",
            "SSL_CERT_FILE",
            "REQUESTS_CA_BUNDLE",
        ]
        self._orig = {k: os.environ.get(k) for k in self._keys}

        for k in self._keys:
            os.environ.pop(k, None)

    def tearDown(self) -> None:
        for k in self._keys:
            os.environ.pop(k, None)
        for k, v in self._orig.items():
            if v is not None:
                os.environ[k] = v

    def test_apply_config_sets_proxy_and_ca_env(self):
        from config import AppConfig, apply_config_to_env

        with tempfile.NamedTemporaryFile(suffix=".pem") as ca:
            cfg = AppConfig(
                http_proxy="http://proxy.local:3128",
                https_proxy="http://proxy.local:3128",
                no_proxy="127.0.0.1,localhost",
                ssl_ca_file=ca.name,
            )
            apply_config_to_env(cfg)

            self.assertEqual(os.environ.get("http_proxy"), "http://proxy.local:3128")
            self.assertEqual(os.environ.get("HTTP_PROXY"), "http://proxy.local:3128")
            self.assertEqual(os.environ.get("HTTPS_PROXY"), "http://proxy.local:3128")
            self.assertEqual(os.environ.get("NO_PROXY"), "127.0.0.1,localhost")
            self.assertEqual(os.environ.get("SSL_CERT_FILE"), ca.name)
            self.assertEqual(os.environ.get("REQUESTS_CA_BUNDLE"), ca.name)

    def test_apply_config_does_not_override_existing_env(self):
        from config import AppConfig, apply_config_to_env

        os.environ["HTTP_PROXY"] = "http://already-set:8080"

        apply_config_to_env(AppConfig(http_proxy="http://proxy.local:3128"))

        self.assertEqual(os.environ.get("HTTP_PROXY"), "http://already-set:8080")
        # Lower-case still gets set if missing.
        self.assertEqual(os.environ.get("http_proxy"), "http://proxy.local:3128")


class TestLoadConfig(unittest.TestCase):
    def setUp(self) -> None:
        self._orig = os.environ.pop("PROMPT_CATALOG_CONFIG", None)
        self._tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self._tmp.name)

    def tearDown(self) -> None:
        os.environ.pop("PROMPT_CATALOG_CONFIG", None)
        if self._orig is not None:
            os.environ["PROMPT_CATALOG_CONFIG"] = self._orig
        self._tmp.cleanup()

    def test_missing_file_falls_back_to_defaults(self):
        from config import load_config

        cfg = load_config(str(self.dir / "absent.yaml"))

        self.assertEqual(cfg.docs_root, "./")
        self.assertEqual(cfg.lookup_limit, 5)
        self.assertFalse(cfg.check_external_links)
        self.assertIn("INDEX.md", cfg.index_file_patterns)

    def test_env_var_points_to_yaml(self):
        from config import load_config

        path = self.dir / "catalog.yaml"
        path.write_text(
            "docs_root: ./prompts\nlookup_limit: 3\nexclude_dirs: [drafts]\n",
            encoding="utf-8",
        )
        os.environ["PROMPT_CATALOG_CONFIG"] = str(path)

        cfg = load_config()

        self.assertEqual(cfg.docs_root, "./prompts")
        self.assertEqual(cfg.lookup_limit, 3)
        self.assertEqual(cfg.exclude_dirs, ["drafts"])

    def test_empty_file_gives_defaults(self):
        from config import load_config

        path = self.dir / "empty.yaml"
        path.write_text("", encoding="utf-8")

        self.assertEqual(load_config(str(path)).readme_file, "README.md")

    def test_non_mapping_yaml_is_rejected(self):
        from config import load_config

        path = self.dir / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")

        with self.assertRaises(ValueError):
            load_config(str(path))

    def test_invalid_yaml_is_rejected(self):
        from config import load_config

        path = self.dir / "broken.yaml"
        path.write_text("docs_root: [unclosed\n", encoding="utf-8")

        with self.assertRaises(ValueError):
            load_config(str(path))

    def test_invalid_debug_level_is_rejected(self):
        from config import configure_logging

        with self.assertRaises(ValueError):
            configure_logging("LOUD")


if __name__ == "__main__":
    unittest.main()
