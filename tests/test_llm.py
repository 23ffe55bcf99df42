from types import SimpleNamespace

import pytest

from services.api import llm as llm_module
from services.api.errors import ConfigurationError, ModelInvocationError
from services.api.llm import GeminiInvoker, WebSource, build_invoker, extract_sources


def _web(title, uri):
    return SimpleNamespace(web=SimpleNamespace(title=title, uri=uri))


def test_extract_sources_skips_entries_without_url():
    resp = SimpleNamespace(
        candidates=[
            SimpleNamespace(
                grounding_metadata=SimpleNamespace(
                    grounding_chunks=[
                        _web("RPP", "https://rpp.pe/nota"),
                        _web("Sin enlace", None),
                        SimpleNamespace(web=None),
                    ]
                )
            )
        ]
    )
    assert extract_sources(resp) == [WebSource(title="RPP", url="https://rpp.pe/nota")]


def test_extract_sources_without_metadata():
    assert extract_sources(SimpleNamespace(candidates=None)) == []
    assert extract_sources(SimpleNamespace(candidates=[SimpleNamespace(grounding_metadata=None)])) == []


def test_gemini_requires_api_key():
    inv = GeminiInvoker(api_key=None, model="gemini-2.5-flash")
    with pytest.raises(ConfigurationError) as exc:
        inv.ensure_configured()
    assert "GEMINI_API_KEY" in exc.value.message


def test_gemini_wraps_client_errors():
    class Boom:
        def generate_content(self, **kwargs):
            raise RuntimeError("quota exceeded")

    inv = GeminiInvoker(api_key="k", model="gemini-2.5-flash")
    inv._client = SimpleNamespace(models=Boom())
    with pytest.raises(ModelInvocationError) as exc:
        inv.generate("hola")
    assert "quota exceeded" in exc.value.message


def test_gemini_returns_text_and_sources():
    calls = {}

    class Models:
        def generate_content(self, **kwargs):
            calls.update(kwargs)
            return SimpleNamespace(
                text="respuesta",
                candidates=[
                    SimpleNamespace(
                        grounding_metadata=SimpleNamespace(
                            grounding_chunks=[_web("JNE", "https://jne.gob.pe")]
                        )
                    )
                ],
            )

    inv = GeminiInvoker(api_key="k", model="gemini-2.5-flash")
    inv._client = SimpleNamespace(models=Models())

    plain = inv.generate("hola")
    assert plain.text == "respuesta"
    assert plain.sources == []
    assert calls["model"] == "gemini-2.5-flash"
    assert calls["config"] is None

    grounded = inv.generate("hola", model="gemini-search", search=True)
    assert grounded.sources == [WebSource(title="JNE", url="https://jne.gob.pe")]
    assert calls["model"] == "gemini-search"
    assert calls["config"].tools


def test_build_invoker_backends():
    kwargs = dict(
        gemini_api_key="k",
        gemini_model="gemini-2.5-flash",
        aws_region="us-east-1",
        bedrock_model="anthropic.claude-3-haiku-20240307-v1:0",
    )
    assert build_invoker("gemini", **kwargs).backend == "gemini"
    assert build_invoker("bedrock", **kwargs).backend == "bedrock"
    assert build_invoker("other", **kwargs).backend == "gemini"


def test_gemini_wraps_client_construction_errors(monkeypatch):
    def broken_client(**kwargs):
        raise ValueError("bad credentials format")

    monkeypatch.setattr(llm_module.genai, "Client", broken_client)
    inv = GeminiInvoker(api_key="k", model="gemini-2.5-flash")
    with pytest.raises(ModelInvocationError) as exc:
        inv.generate("hola")
    assert "bad credentials format" in exc.value.message


def test_gemini_wraps_unexpected_response_shape():
    class Models:
        def generate_content(self, **kwargs):
            return object()

    inv = GeminiInvoker(api_key="k", model="gemini-2.5-flash")
    inv._client = SimpleNamespace(models=Models())
    with pytest.raises(ModelInvocationError):
        inv.generate("hola")


def test_bedrock_transport_does_not_retry():
    assert llm_module._cfg().retries["max_attempts"] == 1
