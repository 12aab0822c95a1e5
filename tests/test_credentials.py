import unittest

from generators.providers.credentials import (
    CredentialStore,
    clean_api_key,
    describe_credential_problem,
    mask_api_key,
    validate_credential,
)
from generators.providers.provider_model import Capability

OPENAI_KEY = "sk-" + "a1B2" * 6
GOOGLE_KEY = "AIza" + "B" * 35
HUGGINGFACE_KEY = "hf_" + "c" * 34
ELEVENLABS_KEY = "0123456789abcdef" * 2
STABILITY_KEY = "sk-" + "D" * 44


class TestCleanApiKey(unittest.TestCase):
    def test_strips_trailing_crlf(self):
        self.assertEqual(clean_api_key("sk-abc123\r\n"), "sk-abc123")

    def test_strips_mixed_trailing_whitespace_runs(self):
        self.assertEqual(clean_api_key("  key-value \t\r\n\r\n  "), "key-value")

    def test_absent_input_returns_empty_string(self):
        self.assertEqual(clean_api_key(None), "")
        self.assertEqual(clean_api_key(""), "")

    def test_is_idempotent(self):
        samples = ["sk-abc123\r\n", "  x \n", "plain", "", "\r\n", "a b\tc\r"]
        for sample in samples:
            with self.subTest(sample=sample):
                once = clean_api_key(sample)
                self.assertEqual(clean_api_key(once), once)


class TestValidateCredential(unittest.TestCase):
    def test_accepts_well_formed_keys(self):
        cases = {
            "openai": OPENAI_KEY,
            "google": GOOGLE_KEY,
            "huggingface": HUGGINGFACE_KEY,
            "elevenlabs": ELEVENLABS_KEY,
            "stability": STABILITY_KEY,
        }
        for provider_name, key in cases.items():
            with self.subTest(provider=provider_name):
                self.assertTrue(validate_credential(Capability.TEXT, provider_name, key))

    def test_rejects_wrong_prefix(self):
        self.assertFalse(validate_credential(Capability.TEXT, "openai", "pk-" + "a" * 30))
        self.assertFalse(validate_credential(Capability.TEXT, "huggingface", OPENAI_KEY))

    def test_rejects_placeholder_values(self):
        problem = describe_credential_problem("openai", "your_openai_api_key_here")
        self.assertEqual(problem, "API key appears to be a placeholder value")

    def test_rejects_short_keys(self):
        self.assertEqual(
            describe_credential_problem("unknown", "abc"),
            "API key is too short to be valid",
        )

    def test_unknown_provider_only_needs_basic_checks(self):
        self.assertIsNone(describe_credential_problem("custom", "custom-key-123456"))


class TestCredentialStore(unittest.TestCase):
    def test_missing_env_variable(self):
        status = CredentialStore({}).is_configured("openai")
        self.assertFalse(status.configured)
        self.assertEqual(status.reason, "OPENAI_API_KEY environment variable not set")

    def test_configured_after_cleaning(self):
        store = CredentialStore({"OPENAI_API_KEY": OPENAI_KEY + "\r\n"})
        status = store.is_configured("openai")
        self.assertTrue(status.configured)
        self.assertIsNone(status.reason)
        self.assertEqual(store.get("OPENAI_API_KEY"), OPENAI_KEY)

    def test_invalid_format_reports_reason(self):
        status = CredentialStore({"OPENAI_API_KEY": "sk-short"}).is_configured("openai")
        self.assertFalse(status.configured)
        self.assertIn("doesn't match expected pattern", status.reason)

    def test_custom_validator_rejection(self):
        store = CredentialStore({"CUSTOM_KEY": "custom-key-123456"})
        status = store.is_configured(
            "custom",
            credential_key="CUSTOM_KEY",
            validator=lambda capability, name, key: False,
            capability=Capability.IMAGE,
        )
        self.assertFalse(status.configured)
        self.assertEqual(status.reason, "API key rejected by custom validator")

    def test_unknown_provider_without_key_name(self):
        status = CredentialStore({}).is_configured("nobody")
        self.assertEqual(status.reason, "Unknown provider: nobody")

    def test_services_status(self):
        store = CredentialStore({"GOOGLE_AI_API_KEY": GOOGLE_KEY})
        statuses = store.services_status(["google", "elevenlabs"])
        self.assertTrue(statuses["google"].configured)
        self.assertFalse(statuses["elevenlabs"].configured)


class TestMaskApiKey(unittest.TestCase):
    def test_masks_middle(self):
        masked = mask_api_key(OPENAI_KEY)
        self.assertTrue(masked.startswith(OPENAI_KEY[:4]))
        self.assertTrue(masked.endswith(OPENAI_KEY[-4:]))
        self.assertNotIn(OPENAI_KEY[4:-4], masked)

    def test_short_key(self):
        self.assertEqual(mask_api_key("abc"), "***")
        self.assertEqual(mask_api_key(None), "***")


if __name__ == "__main__":
    unittest.main()
