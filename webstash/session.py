"""Language-model session management.

A single conversational session is created lazily on the first prompt and
thrown away whenever sampling parameters change or a call fails, so the next
prompt always starts from a fresh session.

The default facility talks to a local Ollama instance: capability and
parameter discovery go straight to its REST API, generation goes through
LangChain's ``ChatOllama``.
"""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol

import httpx
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_ollama import ChatOllama

from webstash.config import TOP_K_CAP, Settings
from webstash.prompts import SYSTEM_PROMPT

logger = logging.getLogger(__name__)

MAX_HISTORY = 10  # exchanges kept per session (user + assistant = 2 entries)
MIN_TEMPERATURE = 0.0
MAX_TEMPERATURE = 2.0

# Ollama's built-in sampling defaults, used when a model does not override them
OLLAMA_DEFAULT_TEMPERATURE = 0.8
OLLAMA_DEFAULT_TOP_K = 40

_THINK_RE = re.compile(r"<think>.*?</think>", re.DOTALL)

_LANGUAGE_NAMES: dict[str, str] = {"en": "English"}


class FeatureUnavailableError(RuntimeError):
    """The language-model facility is missing or unreachable."""


@dataclass(frozen=True)
class ModelDefaults:
    """Sampling parameters advertised by the model."""

    default_temperature: float
    default_top_k: int
    max_top_k: int


@dataclass(frozen=True)
class SessionOptions:
    """Everything needed to create a session."""

    temperature: float
    top_k: int
    output_language: str = "en"
    initial_prompts: list[dict[str, str]] = field(
        default_factory=lambda: [{"role": "system", "content": SYSTEM_PROMPT}]
    )


class LanguageModelSession(Protocol):
    async def prompt(self, text: str) -> Any: ...

    def destroy(self) -> None: ...


class LanguageModelFacility(Protocol):
    async def available(self) -> bool: ...

    async def params(self) -> ModelDefaults: ...

    async def create(self, options: SessionOptions) -> LanguageModelSession: ...


# ---------------------------------------------------------------------------
# Ollama facility
# ---------------------------------------------------------------------------


def _strip_thinking_tags(text: str) -> str:
    """Remove ``<think>...</think>`` blocks that Qwen3 may produce."""
    return _THINK_RE.sub("", text).strip()


def _parse_parameters(block: str | None) -> dict[str, str]:
    """Parse Ollama's ``parameters`` block (``name value`` per line)."""
    params: dict[str, str] = {}
    for line in (block or "").splitlines():
        parts = line.split(None, 1)
        if len(parts) == 2:
            params.setdefault(parts[0], parts[1].strip().strip('"'))
    return params


def _system_message(options: SessionOptions) -> str:
    contents = [p["content"] for p in options.initial_prompts if p.get("role") == "system"]
    language = _LANGUAGE_NAMES.get(options.output_language, options.output_language)
    contents.append(f"Always respond in {language}.")
    return " ".join(contents)


class OllamaSession:
    """Conversation over a ``ChatOllama`` model with bounded history."""

    def __init__(self, model: ChatOllama, system_prompt: str) -> None:
        self._model = model
        self._system = SystemMessage(content=system_prompt)
        self._history: list[BaseMessage] = []
        self._destroyed = False

    async def prompt(self, text: str) -> Any:
        if self._destroyed:
            raise RuntimeError("Session has been destroyed")

        messages = [self._system, *self._history, HumanMessage(content=text)]
        # invoke() keeps the client off any particular event loop
        result = await asyncio.to_thread(self._model.invoke, messages)
        content = result.content
        if isinstance(content, str):
            content = _strip_thinking_tags(content)

        self._history.append(HumanMessage(content=text))
        self._history.append(AIMessage(content=content))
        self._history = self._history[-(MAX_HISTORY * 2) :]
        return content

    def destroy(self) -> None:
        self._history.clear()
        self._destroyed = True


class OllamaFacility:
    """Language-model facility backed by a local Ollama instance."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self._base_url = settings.ollama_base_url.rstrip("/")

    def _model_names(self) -> set[str]:
        model = self.settings.ollama_model
        return {model} if ":" in model else {model, f"{model}:latest"}

    async def available(self) -> bool:
        try:
            async with httpx.AsyncClient(timeout=10) as client:
                resp = await client.get(f"{self._base_url}/api/tags")
                resp.raise_for_status()
                data = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Ollama unavailable at %s: %s", self._base_url, exc)
            return False

        names = {m.get("name") for m in data.get("models", [])} | {
            m.get("model") for m in data.get("models", [])
        }
        if not names & self._model_names():
            logger.warning("Model %s is not pulled in Ollama", self.settings.ollama_model)
            return False
        return True

    async def params(self) -> ModelDefaults:
        async with httpx.AsyncClient(timeout=30) as client:
            resp = await client.post(
                f"{self._base_url}/api/show",
                json={"model": self.settings.ollama_model},
            )
            resp.raise_for_status()
            data = resp.json()

        params = _parse_parameters(data.get("parameters"))
        return ModelDefaults(
            default_temperature=float(
                params.get("temperature", OLLAMA_DEFAULT_TEMPERATURE)
            ),
            default_top_k=int(params.get("top_k", OLLAMA_DEFAULT_TOP_K)),
            max_top_k=self.settings.max_top_k,
        )

    async def create(self, options: SessionOptions) -> OllamaSession:
        model = ChatOllama(
            model=self.settings.ollama_model,
            base_url=self._base_url,
            temperature=options.temperature,
            top_k=options.top_k,
            client_kwargs={"timeout": self.settings.ollama_timeout},
        )
        return OllamaSession(model, _system_message(options))


# ---------------------------------------------------------------------------
# Session manager
# ---------------------------------------------------------------------------


class ModelSessionManager:
    """Owns the single shared session and its sampling parameters.

    The session moves between two states: none, and active. It is created
    on the first prompt, kept across prompts, and destroyed on any failure,
    on parameter changes, or on an explicit :meth:`reset`.
    """

    def __init__(
        self,
        facility: Optional[LanguageModelFacility],
        settings: Settings,
    ) -> None:
        self.facility = facility
        self.temperature = settings.default_temperature
        self.top_k_cap = settings.top_k_cap or TOP_K_CAP
        self.max_top_k = settings.max_top_k
        self.top_k = max(1, min(OLLAMA_DEFAULT_TOP_K, self.top_k_cap, self.max_top_k))
        self.output_language = settings.output_language
        self.defaults_seeded = False
        self.seed_attempted = False
        # parameters the user has chosen; seeding leaves these alone
        self._user_set: set[str] = set()
        self.sessions_created = 0
        self._session: Optional[LanguageModelSession] = None

    @property
    def active(self) -> bool:
        """Whether a session currently exists."""
        return self._session is not None

    async def seed_defaults(self, retry: bool = False) -> None:
        """Take starting values from the model once.

        A failed attempt is only repeated when *retry* is set, which the
        prompt path does so each question gets one more try. Values the
        user has already chosen are kept; only the limits and untouched
        parameters come from the model.
        """
        if self.defaults_seeded or self.facility is None:
            return
        if self.seed_attempted and not retry:
            return
        self.seed_attempted = True
        try:
            defaults = await self.facility.params()
        except Exception as e:
            logger.warning("Could not read model defaults: %s", e)
            return

        self.max_top_k = max(1, defaults.max_top_k)
        if "temperature" not in self._user_set:
            self.temperature = round(defaults.default_temperature, 1)
        if "top_k" in self._user_set:
            self.top_k = min(self.top_k, self.max_top_k)
        else:
            self.top_k = max(1, min(defaults.default_top_k, self.top_k_cap, self.max_top_k))
        self.defaults_seeded = True
        logger.info(
            "Seeded sampling defaults: temperature=%.1f top_k=%d max_top_k=%d",
            self.temperature,
            self.top_k,
            self.max_top_k,
        )

    def set_temperature(self, value: float) -> None:
        self.temperature = min(max(float(value), MIN_TEMPERATURE), MAX_TEMPERATURE)
        self._user_set.add("temperature")
        self.reset()

    def set_top_k(self, value: int) -> None:
        self.top_k = min(max(int(value), 1), self.max_top_k)
        self._user_set.add("top_k")
        self.reset()

    def current_options(self) -> SessionOptions:
        return SessionOptions(
            temperature=self.temperature,
            top_k=self.top_k,
            output_language=self.output_language,
        )

    def reset(self) -> None:
        """Destroy the current session, if any."""
        session, self._session = self._session, None
        if session is None:
            return
        try:
            session.destroy()
        except Exception as e:
            logger.warning("Session destroy failed: %s", e)
        logger.info("Model session reset")

    async def _ensure_session(self) -> LanguageModelSession:
        if self._session is not None:
            return self._session
        if self.facility is None or not await self.facility.available():
            raise FeatureUnavailableError(
                "The local language model is not available. "
                "Make sure Ollama is running and the model is pulled."
            )
        await self.seed_defaults(retry=True)
        options = self.current_options()
        self._session = await self.facility.create(options)
        self.sessions_created += 1
        logger.info(
            "Created model session #%d (temperature=%.1f top_k=%d)",
            self.sessions_created,
            options.temperature,
            options.top_k,
        )
        return self._session

    async def prompt(self, text: str) -> Any:
        """Send *text* to the session, creating it first if needed."""
        try:
            session = await self._ensure_session()
            return await session.prompt(text)
        except Exception:
            self.reset()
            raise
