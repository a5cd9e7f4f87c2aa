"""Tests for chat model construction."""

from unittest.mock import MagicMock

import pytest

from study_quiz.agents import llm
from study_quiz.config.settings import Settings


@pytest.fixture
def fake_bedrock(monkeypatch):
    bedrock = MagicMock(name="ChatBedrock")
    monkeypatch.setattr(llm, "ChatBedrock", bedrock)
    for name in (
        "LLM_PROVIDER",
        "AWS_ACCESS_KEY_ID",
        "AWS_SECRET_ACCESS_KEY",
        "AWS_DEFAULT_REGION",
    ):
        monkeypatch.delenv(name, raising=False)
    return bedrock


class TestBuildChatModel:
    """Test provider selection and Bedrock arguments."""

    def test_passes_configured_credentials(self, fake_bedrock):
        """Test that explicit AWS keys reach the Bedrock client."""
        settings = Settings(
            _env_file=None,
            AWS_ACCESS_KEY_ID="key-id",
            AWS_SECRET_ACCESS_KEY="key-secret",
            AWS_DEFAULT_REGION="eu-west-1",
        )

        llm.build_chat_model(settings)

        kwargs = fake_bedrock.call_args.kwargs
        assert kwargs["aws_access_key_id"] == "key-id"
        assert kwargs["aws_secret_access_key"] == "key-secret"
        assert kwargs["region_name"] == "eu-west-1"

    def test_omits_credentials_when_unset(self, fake_bedrock):
        """Test that the default credential chain is used without keys."""
        llm.build_chat_model(Settings(_env_file=None))

        kwargs = fake_bedrock.call_args.kwargs
        assert "aws_access_key_id" not in kwargs
        assert "region_name" not in kwargs

    def test_anthropic_provider(self, monkeypatch, fake_bedrock):
        """Test that the anthropic provider skips Bedrock."""
        anthropic = MagicMock(name="ChatAnthropic")
        monkeypatch.setattr(llm, "ChatAnthropic", anthropic)

        llm.build_chat_model(Settings(_env_file=None, LLM_PROVIDER="anthropic"))

        anthropic.assert_called_once()
        fake_bedrock.assert_not_called()
