from types import SimpleNamespace

import pytest

from newsprint.config import AppSettings
from newsprint.services import generation
from newsprint.services.exceptions import CapabilityError
from newsprint.utils.text_cleaner import strip_code_fences

REQUEST = generation.GenerationRequest(
    system="You are terse.",
    prompt="Say hello",
    model="gpt-4o-mini",
    temperature=0.3,
    max_tokens=50,
)


class FakeCompletions:
    def __init__(self, response=None, error=None):
        self.calls = []
        self._response = response
        self._error = error

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self._error is not None:
            raise self._error
        return self._response


def _client(completions):
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


def _completion(text):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=text))])


def test_openai_generator_sends_system_and_user_messages():
    completions = FakeCompletions(response=_completion("Hello"))
    generator = generation.OpenAIGenerator(client=_client(completions))

    assert generation.generate_text(generator, REQUEST, operation="test") == "Hello"

    call = completions.calls[0]
    assert call["model"] == "gpt-4o-mini"
    assert call["temperature"] == pytest.approx(0.3)
    assert call["max_tokens"] == 50
    assert call["messages"] == [
        {"role": "system", "content": "You are terse."},
        {"role": "user", "content": "Say hello"},
    ]


def test_openai_generator_without_key_is_a_capability_error():
    generator = generation.OpenAIGenerator(api_key=None)

    with pytest.raises(CapabilityError) as excinfo:
        generation.generate_text(generator, REQUEST, operation="test")

    assert "OPENAI_API_KEY" in str(excinfo.value)
    assert excinfo.value.provider == "openai"


def test_openai_generator_rejects_empty_choices():
    generator = generation.OpenAIGenerator(
        client=_client(FakeCompletions(response=SimpleNamespace(choices=[])))
    )

    with pytest.raises(CapabilityError):
        generation.generate_text(generator, REQUEST, operation="test")


def test_provider_exceptions_are_wrapped_with_their_cause():
    error = RuntimeError("rate limited")
    generator = generation.OpenAIGenerator(
        client=_client(FakeCompletions(error=error))
    )

    with pytest.raises(CapabilityError) as excinfo:
        generation.generate_text(generator, REQUEST, operation="test")

    assert str(excinfo.value) == "rate limited"
    assert excinfo.value.__cause__ is error


def test_gemini_generator_without_key_is_a_capability_error():
    with pytest.raises(CapabilityError):
        generation.generate_text(
            generation.GeminiGenerator(api_key=None), REQUEST, operation="test"
        )


def test_build_generator_selects_provider():
    gemini = generation.build_generator(
        AppSettings(GENERATION_PROVIDER="Gemini", GEMINI_API_KEY="key")
    )
    openai = generation.build_generator(
        AppSettings(GENERATION_PROVIDER="openai", OPENAI_API_KEY=None)
    )
    fallback = generation.build_generator(
        AppSettings(GENERATION_PROVIDER="mystery", OPENAI_API_KEY=None)
    )

    assert isinstance(gemini, generation.GeminiGenerator)
    assert isinstance(openai, generation.OpenAIGenerator)
    assert isinstance(fallback, generation.OpenAIGenerator)


def test_strip_code_fences():
    assert strip_code_fences("```html\n<p>Hi</p>\n```") == "<p>Hi</p>"
    assert strip_code_fences("```HTML<p>`x`</p>```") == "<p>x</p>"
    assert strip_code_fences(None) == ""
