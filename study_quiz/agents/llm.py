"""Chat model construction for the configured provider."""

from functools import lru_cache

from langchain_anthropic import ChatAnthropic
from langchain_aws import ChatBedrock
from langchain_core.language_models.chat_models import BaseChatModel

from study_quiz.config.settings import Settings, get_settings


def build_chat_model(settings: Settings | None = None) -> BaseChatModel:
    """
    Create the chat model used for question generation.

    Args:
        settings: Settings to read provider and model from (defaults to cached settings)

    Returns:
        A LangChain chat model
    """
    settings = settings or get_settings()

    if settings.llm_provider == "anthropic":
        return ChatAnthropic(
            model=settings.model_name,
            temperature=settings.generation_temperature,
        )

    kwargs = {}
    if settings.aws_api_key_id and settings.aws_api_key_secret:
        kwargs["aws_access_key_id"] = settings.aws_api_key_id
        kwargs["aws_secret_access_key"] = settings.aws_api_key_secret
    if settings.aws_default_region:
        kwargs["region_name"] = settings.aws_default_region
    return ChatBedrock(
        model=settings.model_name,
        temperature=settings.generation_temperature,
        **kwargs,
    )


@lru_cache
def get_chat_model() -> BaseChatModel:
    """Chat model for the cached settings, built on first use."""
    return build_chat_model()
