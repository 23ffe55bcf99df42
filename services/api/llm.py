import json
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import boto3
from botocore.config import Config
from google import genai
from google.genai import types

from services.api.errors import ConfigurationError, ModelInvocationError

logger = logging.getLogger(__name__)

MISSING_KEY_MESSAGE = (
    "API key no configurada. Agrega GEMINI_API_KEY en las variables de entorno."
)
MISSING_KEY_RESPONSE = "⚠️ Configura GEMINI_API_KEY en las variables de entorno del servidor."


@dataclass(frozen=True)
class WebSource:
    title: Optional[str]
    url: str

    def to_dict(self) -> Dict[str, Any]:
        return {"title": self.title, "url": self.url}


@dataclass
class ModelReply:
    text: str
    sources: List[WebSource] = field(default_factory=list)


def extract_sources(response: Any) -> List[WebSource]:
    """Pull web citations out of Gemini grounding metadata; entries without a URL are skipped."""
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return []
    meta = getattr(candidates[0], "grounding_metadata", None)
    chunks = getattr(meta, "grounding_chunks", None) or []
    out: List[WebSource] = []
    for ch in chunks:
        web = getattr(ch, "web", None)
        url = getattr(web, "uri", None)
        if url:
            out.append(WebSource(title=getattr(web, "title", None), url=url))
    return out


# ========= Gemini (default backend) =========
class GeminiInvoker:
    backend = "gemini"

    def __init__(self, api_key: Optional[str], model: str):
        self.api_key = api_key
        self.model = model
        self._client: Optional[genai.Client] = None
        self._lock = threading.Lock()

    def ensure_configured(self) -> None:
        if not self.api_key:
            raise ConfigurationError(MISSING_KEY_MESSAGE, response=MISSING_KEY_RESPONSE)

    def _get_client(self) -> genai.Client:
        self.ensure_configured()
        if self._client is None:
            with self._lock:
                if self._client is None:
                    self._client = genai.Client(api_key=self.api_key)
        return self._client

    def generate(
        self, prompt: str, model: Optional[str] = None, search: bool = False
    ) -> ModelReply:
        self.ensure_configured()
        model = model or self.model

        logger.info(
            "Calling LLM",
            extra={"model": model, "search": search, "prompt_length": len(prompt)},
        )
        try:
            client = self._get_client()
            config = None
            if search:
                config = types.GenerateContentConfig(
                    tools=[types.Tool(google_search=types.GoogleSearch())]
                )
            resp = client.models.generate_content(
                model=model, contents=prompt, config=config
            )
            sources = extract_sources(resp) if search else []
            text = resp.text or ""
        except Exception as e:
            raise ModelInvocationError(str(e)) from e

        return ModelReply(text=text, sources=sources)


# ========= Bedrock (Claude via boto3) =========
def _cfg():
    # one outbound call per generate(); retries are the caller's decision
    return Config(retries={"max_attempts": 1, "mode": "standard"})


class BedrockInvoker:
    """
    Claude on Bedrock. There is no web-search tool here, so `search=True`
    degrades to a plain call with no sources.
    """

    backend = "bedrock"

    def __init__(self, region: str, model: str, max_tokens: int = 2048):
        self.region = region
        self.model = model
        self.max_tokens = max_tokens

    def ensure_configured(self) -> None:
        if not self.model:
            raise ConfigurationError(
                "BEDROCK_MODEL no configurado.",
                response="⚠️ Configura BEDROCK_MODEL en las variables de entorno del servidor.",
            )

    def _bedrock(self):
        return boto3.client("bedrock-runtime", region_name=self.region, config=_cfg())

    def generate(
        self, prompt: str, model: Optional[str] = None, search: bool = False
    ) -> ModelReply:
        self.ensure_configured()
        # Gemini model names from the shared config do not apply here
        model_id = model if model and not model.startswith("gemini") else self.model
        body = {
            "anthropic_version": "bedrock-2023-05-31",
            "max_tokens": self.max_tokens,
            "temperature": 0.2,
            "messages": [
                {"role": "user", "content": [{"type": "text", "text": prompt}]}
            ],
        }

        logger.info(
            "Calling LLM",
            extra={"model": model_id, "search": search, "prompt_length": len(prompt)},
        )
        try:
            resp = self._bedrock().invoke_model(modelId=model_id, body=json.dumps(body))
            payload = json.loads(resp["body"].read())
            # Anthropic Messages response shape: {"content":[{"type":"text","text":"..."}], ...}
            text = payload["content"][0]["text"]
        except Exception as e:
            raise ModelInvocationError(str(e)) from e
        return ModelReply(text=text)


def build_invoker(
    backend: str,
    *,
    gemini_api_key: Optional[str],
    gemini_model: str,
    aws_region: str,
    bedrock_model: str,
):
    if backend == "bedrock":
        return BedrockInvoker(region=aws_region, model=bedrock_model)
    if backend != "gemini":
        logger.warning("Unknown LLM_BACKEND, using gemini", extra={"backend": backend})
    return GeminiInvoker(api_key=gemini_api_key, model=gemini_model)
