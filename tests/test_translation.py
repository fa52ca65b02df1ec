from newsprint.config import GenerationConfig, LocaleConfig
from newsprint.services import translation
from newsprint.services.exceptions import CapabilityError

TITLE = "City approves budget"
CONTENT = "<p>The city council approved the annual budget on Monday.</p>"


def _run(generator, **kwargs):
    return translation.detect_and_translate(
        TITLE, CONTENT, generator=generator, generation=GenerationConfig(), **kwargs
    )


def test_native_language_skips_translation(make_generator):
    generator = make_generator(responses=["Türkçe"])

    result = _run(generator)

    assert result == translation.LanguageResult(language="Türkçe", is_translated=False)
    assert len(generator.requests) == 1


def test_detection_answer_is_trimmed(make_generator):
    generator = make_generator(responses=["  Türkçe\n"])

    assert _run(generator).language == "Türkçe"


def test_foreign_article_is_translated(make_generator):
    generator = make_generator(
        responses=["İngilizce", "Şehir bütçeyi onayladı", "<p>Belediye meclisi...</p>"]
    )

    result = _run(generator)

    assert result.language == "İngilizce"
    assert result.is_translated is True
    assert result.translated_title == "Şehir bütçeyi onayladı"
    assert result.translated_content == "<p>Belediye meclisi...</p>"
    assert [request.max_tokens for request in generator.requests] == [50, 200, 3000]
    assert TITLE in generator.requests[1].prompt
    assert CONTENT in generator.requests[2].prompt


def test_title_failure_leaves_inline_placeholder(make_generator):
    generator = make_generator(
        responses=["İngilizce", RuntimeError("quota exceeded"), "<p>Çeviri</p>"]
    )

    result = _run(generator)

    assert result.is_translated is True
    assert result.translated_title == "[Çeviri hatası: quota exceeded]"
    assert result.translated_content == "<p>Çeviri</p>"


def test_content_failure_leaves_escaped_placeholder(make_generator):
    generator = make_generator(
        responses=["Almanca", "Başlık", RuntimeError("bad <gateway>")]
    )

    result = _run(generator)

    assert result.translated_title == "Başlık"
    assert result.translated_content == "<p>[Çeviri hatası: bad &lt;gateway&gt;]</p>"


def test_detection_failure_reports_unknown_language(make_generator):
    generator = make_generator(responses=[CapabilityError("no key")])

    result = _run(generator)

    assert result.language == "Bilinmiyor"
    assert result.is_translated is False
    assert result.translated_title is None
    assert len(generator.requests) == 1


def test_empty_detection_answer_counts_as_failure(make_generator):
    generator = make_generator(responses=["   "])

    result = _run(generator)

    assert result.language == "Bilinmiyor"
    assert len(generator.requests) == 1


def test_detection_prompt_uses_plain_text_sample(make_generator):
    generator = make_generator(responses=["Türkçe"])
    content = "<p>" + "a" * 2000 + "</p>"

    translation.detect_and_translate(TITLE, content, generator=generator)

    prompt = generator.requests[0].prompt
    assert "<p>" not in prompt
    assert "a" * 500 in prompt
    assert "a" * 501 not in prompt


def test_locale_controls_language_and_labels(make_generator):
    locale = LocaleConfig(
        language="English",
        language_english="English",
        language_examples=("English", "German"),
        unknown_language="Unknown",
        translation_error_label="Translation error",
    )
    native = make_generator(responses=["English"])
    foreign = make_generator(responses=["German", RuntimeError("down"), "<p>x</p>"])

    assert _run(native, locale=locale).is_translated is False
    result = _run(foreign, locale=locale)

    assert result.translated_title == "[Translation error: down]"
    assert "English" in foreign.requests[0].system
    assert "'German'" in foreign.requests[0].system
