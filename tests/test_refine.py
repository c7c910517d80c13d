"""Tests für die LLM-Umformulierung."""

import asyncio
from unittest.mock import AsyncMock, Mock

import httpx
import openai
import pytest

from errors import AuthError, EmptyResponse, UpstreamError
from refine import DEFAULT_REPHRASE_PROMPT, OpenAIRephraser, build_messages, get_rephrase_prompt


def _completion(content):
    message = Mock()
    message.content = content
    return Mock(choices=[Mock(message=message)])


def _client(response=None, side_effect=None) -> Mock:
    client = Mock()
    client.chat.completions.create = AsyncMock(
        return_value=response, side_effect=side_effect
    )
    return client


class TestPrompts:
    def test_default_prompt(self):
        assert get_rephrase_prompt() == DEFAULT_REPHRASE_PROMPT
        assert get_rephrase_prompt("   ") == DEFAULT_REPHRASE_PROMPT

    def test_custom_prompt(self):
        assert get_rephrase_prompt(" Make it formal ") == "Make it formal"

    def test_build_messages_roles(self):
        messages = build_messages("hello", "Fix grammar")
        assert messages == [
            {"role": "system", "content": "Fix grammar"},
            {"role": "user", "content": "hello"},
        ]


class TestOpenAIRephraser:
    """Tests für OpenAIRephraser.rephrase()."""

    def test_returns_stripped_content(self):
        client = _client(_completion("  Clear text.\n"))
        rephraser = OpenAIRephraser("sk-test", client=client)

        assert asyncio.run(rephraser.rephrase("uh so clear text")) == "Clear text."

    def test_request_parameters(self):
        client = _client(_completion("ok"))
        rephraser = OpenAIRephraser("sk-test", client=client)

        asyncio.run(rephraser.rephrase("text", model="gpt-4o", prompt="Be brief"))

        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4o"
        assert kwargs["temperature"] == 0.2
        assert kwargs["max_tokens"] == 2048
        assert [m["role"] for m in kwargs["messages"]] == ["system", "user"]
        assert kwargs["messages"][0]["content"] == "Be brief"

    def test_defaults(self):
        client = _client(_completion("ok"))
        rephraser = OpenAIRephraser("sk-test", client=client)

        asyncio.run(rephraser.rephrase("text"))

        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4o-mini"
        assert kwargs["messages"][0]["content"] == DEFAULT_REPHRASE_PROMPT

    def test_empty_choices_raise_empty_response(self):
        client = _client(Mock(choices=[]))
        rephraser = OpenAIRephraser("sk-test", client=client)

        with pytest.raises(EmptyResponse):
            asyncio.run(rephraser.rephrase("text"))

    @pytest.mark.parametrize("content", [None, "", "   "])
    def test_empty_content_raises_empty_response(self, content):
        client = _client(_completion(content))
        rephraser = OpenAIRephraser("sk-test", client=client)

        with pytest.raises(EmptyResponse):
            asyncio.run(rephraser.rephrase("text"))

    def test_list_content_is_joined(self):
        client = _client(_completion([{"type": "text", "text": "Part one. "}, {"text": "Two."}]))
        rephraser = OpenAIRephraser("sk-test", client=client)

        assert asyncio.run(rephraser.rephrase("text")) == "Part one. Two."

    def test_empty_input_skips_request(self):
        client = _client(_completion("never"))
        rephraser = OpenAIRephraser("sk-test", client=client)

        assert asyncio.run(rephraser.rephrase("  ")) == "  "
        client.chat.completions.create.assert_not_called()

    def test_auth_error(self):
        error = openai.AuthenticationError(
            message="invalid key",
            response=httpx.Response(
                401, request=httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
            ),
            body=None,
        )
        rephraser = OpenAIRephraser("sk-bad", client=_client(side_effect=error))

        with pytest.raises(AuthError):
            asyncio.run(rephraser.rephrase("text"))

    def test_connection_error(self):
        error = openai.APIConnectionError(
            request=httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
        )
        rephraser = OpenAIRephraser("sk-test", client=_client(side_effect=error))

        with pytest.raises(UpstreamError):
            asyncio.run(rephraser.rephrase("text"))

    def test_missing_key(self):
        with pytest.raises(AuthError):
            asyncio.run(OpenAIRephraser("").rephrase("text"))
