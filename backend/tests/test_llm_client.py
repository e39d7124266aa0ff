"""Tests for the inference client and its FastAPI dependency."""

from unittest.mock import patch

import pytest

from app.core import llm_client
from app.core.config import settings
from app.core.errors import Unauthenticated
from app.core.llm_client import get_inference_client


class TestGetInferenceClient:
    @pytest.fixture(autouse=True)
    def _fresh_cache(self, monkeypatch):
        monkeypatch.setattr(llm_client, "_inference_clients", {})

    def test_client_reused_for_same_token(self):
        with patch("app.core.config.get_inference_token", return_value="tok-1"), patch(
            "app.core.config.OpenAI"
        ) as sdk_cls:
            first = get_inference_client()
            second = get_inference_client()

        assert first is second
        sdk_cls.assert_called_once_with(base_url=settings.inference_base_url, api_key="tok-1")

    def test_new_token_gets_new_client(self):
        with patch("app.core.config.get_inference_token") as token, patch(
            "app.core.config.OpenAI"
        ) as sdk_cls:
            token.return_value = "tok-1"
            first = get_inference_client()
            token.return_value = "tok-2"
            second = get_inference_client()

        assert first is not second
        assert sdk_cls.call_count == 2

    def test_missing_token(self):
        with patch("app.core.config.get_inference_token", return_value=None), patch(
            "app.core.config.OpenAI"
        ) as sdk_cls:
            with pytest.raises(Unauthenticated):
                get_inference_client()
        sdk_cls.assert_not_called()


@pytest.mark.asyncio
class TestChat:
    async def test_returns_message_content(self, inference):
        inference.reply("hello")
        content = await inference.client.chat(
            service_name="test",
            messages=[{"role": "user", "content": "hi"}],
            model="m",
            temperature=0.1,
            max_tokens=10,
        )
        assert content == "hello"

    async def test_no_choices_is_empty(self, inference):
        inference.sdk.chat.completions.create.return_value.choices = []
        content = await inference.client.chat(
            service_name="test", messages=[], model="m", temperature=0.1, max_tokens=10
        )
        assert content == ""

    async def test_sdk_errors_propagate(self, inference):
        inference.fail(RuntimeError("boom"))
        with pytest.raises(RuntimeError, match="boom"):
            await inference.client.chat(
                service_name="test", messages=[], model="m", temperature=0.1, max_tokens=10
            )
