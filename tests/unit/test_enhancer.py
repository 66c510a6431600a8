"""
Unit tests for description enhancement.
"""

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

from services.enhancer import (
    DescriptionEnhancer,
    OpenAIDescriptionEnhancer,
    get_description_enhancer,
)


def completion(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def config(**overrides):
    values = {"enabled": True, "api_key": "sk-test", "model": "gpt-test",
              "max_tokens": 150, "temperature": 0.7}
    values.update(overrides)
    return values


class TestPassThrough:

    def test_returns_description_unchanged(self):
        assert DescriptionEnhancer().enhance("Gauze", "") == ""
        assert DescriptionEnhancer().enhance("Gauze", "Sterile") == "Sterile"


class TestOpenAIEnhancer:

    def test_uses_generated_text(self):
        client = MagicMock()
        client.chat.completions.create.return_value = completion("  Soft sterile gauze.  ")
        enhancer = OpenAIDescriptionEnhancer(client, "gpt-test")

        assert enhancer.enhance("Gauze", "") == "Soft sterile gauze."
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-test"
        assert "Product name: Gauze" in kwargs["messages"][0]["content"]

    def test_failure_falls_back_to_original(self, caplog):
        client = MagicMock()
        client.chat.completions.create.side_effect = TimeoutError("quota exceeded")
        enhancer = OpenAIDescriptionEnhancer(client, "gpt-test")

        assert enhancer.enhance("Gauze", "orig") == "orig"
        assert "Error enhancing description" in caplog.text

    def test_malformed_response_falls_back(self):
        client = MagicMock()
        client.chat.completions.create.return_value = SimpleNamespace(choices=[])
        assert OpenAIDescriptionEnhancer(client, "gpt-test").enhance("Gauze", "orig") == "orig"

    def test_empty_response_falls_back(self):
        client = MagicMock()
        client.chat.completions.create.return_value = completion(None)
        assert OpenAIDescriptionEnhancer(client, "gpt-test").enhance("Gauze", "orig") == "orig"


class TestFactory:

    def test_disabled_is_pass_through(self):
        enhancer = get_description_enhancer(config(enabled=False))
        assert type(enhancer) is DescriptionEnhancer

    def test_missing_key_is_pass_through(self):
        enhancer = get_description_enhancer(config(api_key=None))
        assert type(enhancer) is DescriptionEnhancer

    def test_enabled_with_key(self):
        with patch("services.enhancer.OpenAI") as client_cls:
            enhancer = get_description_enhancer(config())

        client_cls.assert_called_once_with(api_key="sk-test")
        assert isinstance(enhancer, OpenAIDescriptionEnhancer)
        assert enhancer.model == "gpt-test"

    def test_reads_environment(self, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        monkeypatch.setenv("ENHANCE_DESCRIPTIONS", "true")
        assert type(get_description_enhancer()) is DescriptionEnhancer
