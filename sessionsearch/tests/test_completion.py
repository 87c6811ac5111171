import types
import unittest
from unittest.mock import patch

from openai import OpenAIError

from sessionsearch.services import completion as completion_module
from sessionsearch.services.completion import (
    CompletionClient,
    CompletionError,
    CompletionOptions,
    CompletionUnavailableError,
)


class _FakeCompletions:
    def __init__(self, response=None, chunks=None, error: Exception | None = None) -> None:
        self.response = response
        self.chunks = chunks or []
        self.error = error
        self.calls: list[dict] = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        if kwargs.get("stream"):
            return self._stream()
        return self.response

    async def _stream(self):
        for chunk in self.chunks:
            yield chunk


def _fake_openai(completions: _FakeCompletions):
    return types.SimpleNamespace(chat=types.SimpleNamespace(completions=completions))


def _choice_response(content):
    return types.SimpleNamespace(choices=[types.SimpleNamespace(message=types.SimpleNamespace(content=content))])


def _delta(content):
    return types.SimpleNamespace(choices=[types.SimpleNamespace(delta=types.SimpleNamespace(content=content))])


class CompletionOptionsTests(unittest.TestCase):
    def test_defaults_follow_config(self) -> None:
        with patch.object(completion_module.config, "AI_MODEL", "some/model"), patch.object(completion_module.config, "AI_MAX_TOKENS", 128):
            options = CompletionOptions()
        self.assertEqual(options.model, "some/model")
        self.assertEqual(options.max_tokens, 128)
        self.assertIsNone(options.stop)

    def test_overrides_skip_none_and_unknown_keys(self) -> None:
        options = CompletionOptions.from_overrides(temperature=0.1, top_p=None, unknown="x")
        self.assertEqual(options.temperature, 0.1)
        self.assertEqual(options.top_p, CompletionOptions().top_p)
        self.assertFalse(hasattr(options, "unknown"))


class CompletionClientTests(unittest.IsolatedAsyncioTestCase):
    def test_placeholder_keys_disable_client(self) -> None:
        for key in ("", "   ", "your_groq_api_key_here"):
            with self.subTest(key=key), self.assertLogs("sessionsearch.completion", level="WARNING"):
                self.assertFalse(CompletionClient(api_key=key).is_available())

    def test_real_key_enables_client(self) -> None:
        client = CompletionClient(api_key="gsk-test", base_url="http://localhost:9/v1")
        self.assertTrue(client.is_available())

    async def test_unavailable_client_raises(self) -> None:
        with self.assertLogs("sessionsearch.completion", level="WARNING"):
            client = CompletionClient(api_key="")
        with self.assertRaises(CompletionUnavailableError):
            await client.complete("hi")
        with self.assertRaises(CompletionUnavailableError):
            async for _ in client.stream("hi"):
                pass

    async def test_complete_sends_options(self) -> None:
        client = CompletionClient(api_key="gsk-test")
        completions = _FakeCompletions(response=_choice_response("answer"))
        client._client = _fake_openai(completions)

        result = await client.complete("prompt", CompletionOptions(model="m", temperature=0.5, max_tokens=10, top_p=0.9))

        self.assertEqual(result, "answer")
        call = completions.calls[0]
        self.assertEqual(call["messages"], [{"role": "user", "content": "prompt"}])
        self.assertEqual(call["model"], "m")
        self.assertEqual(call["max_tokens"], 10)
        self.assertFalse(call["stream"])

    async def test_empty_response_has_fallback_text(self) -> None:
        client = CompletionClient(api_key="gsk-test")
        client._client = _fake_openai(_FakeCompletions(response=types.SimpleNamespace(choices=[])))
        self.assertEqual(await client.complete("prompt"), "No response from AI")

        client._client = _fake_openai(_FakeCompletions(response=_choice_response(None)))
        self.assertEqual(await client.complete("prompt"), "No response from AI")

    async def test_api_errors_are_wrapped(self) -> None:
        client = CompletionClient(api_key="gsk-test")
        client._client = _fake_openai(_FakeCompletions(error=OpenAIError("boom")))
        with self.assertLogs("sessionsearch.completion", level="ERROR"), self.assertRaises(CompletionError) as ctx:
            await client.complete("prompt")
        self.assertIn("boom", str(ctx.exception))

    async def test_stream_skips_empty_deltas(self) -> None:
        client = CompletionClient(api_key="gsk-test")
        completions = _FakeCompletions(
            chunks=[_delta("Hel"), types.SimpleNamespace(choices=[]), _delta(None), _delta("lo")]
        )
        client._client = _fake_openai(completions)

        pieces = [piece async for piece in client.stream("prompt")]

        self.assertEqual(pieces, ["Hel", "lo"])
        self.assertTrue(completions.calls[0]["stream"])


if __name__ == "__main__":
    unittest.main()
