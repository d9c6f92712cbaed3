"""Adapters around text-generation backends (Gemini, OpenAI-compatible HTTP, Ollama)."""

from __future__ import annotations

import json
import os
import subprocess
from dataclasses import dataclass
from typing import Callable, Mapping, Optional, Sequence
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from google import genai
from google.genai import errors as genai_errors
from google.genai import types as genai_types

from ..errors import LLMError

RUNNER_GEMINI = "gemini"
RUNNER_HTTP = "http"
RUNNER_OLLAMA = "ollama"
RUNNER_NAMES = (RUNNER_GEMINI, RUNNER_HTTP, RUNNER_OLLAMA)


@dataclass
class LLMRequest:
    """Represents one generation request handed to a backend."""

    prompt: str
    system: Optional[str]
    model: str
    temperature: Optional[float]
    max_tokens: Optional[int]
    executable: Optional[str]
    base_url: Optional[str]
    api_key: Optional[str]
    request_timeout: Optional[float]


class LLMRunner:
    """Executes prompts against the configured text-generation backend."""

    DEFAULT_RUNNER = RUNNER_GEMINI
    DEFAULT_MODELS = {
        RUNNER_GEMINI: "gemini-2.0-flash",
        RUNNER_HTTP: "gpt-4o-mini",
        RUNNER_OLLAMA: "llama3.1",
    }
    DEFAULT_BASE_URL = "https://api.openai.com/v1"
    ENV_RUNNER_KEYS = ("REPORTGEN_LLM_RUNNER",)
    ENV_MODEL_KEYS = ("REPORTGEN_LLM_MODEL",)
    ENV_BASE_URL_KEYS = ("REPORTGEN_LLM_BASE_URL", "OPENAI_BASE_URL")
    ENV_API_KEY_KEYS = {
        RUNNER_GEMINI: ("REPORTGEN_LLM_API_KEY", "GEMINI_API_KEY", "GOOGLE_API_KEY", "VITE_GEMINI_API_KEY"),
        RUNNER_HTTP: ("REPORTGEN_LLM_API_KEY", "OPENAI_API_KEY"),
        RUNNER_OLLAMA: (),
    }

    def __init__(
        self,
        model: str | None = None,
        *,
        backend: str | None = None,
        base_url: str | None = None,
        executable: str = "ollama",
        temperature: Optional[float] = 0.2,
        max_tokens: Optional[int] = None,
        api_key: str | None = None,
        request_timeout: Optional[float] = 120.0,
        runner: Callable[[LLMRequest], str] | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self._environ = environ if environ is not None else os.environ
        self.backend = self._resolve_backend(backend)
        self.model = model or self._first_env_value(self.ENV_MODEL_KEYS) or self.DEFAULT_MODELS[self.backend]
        self.base_url = self._resolve_base_url(base_url)
        self.executable = executable
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.api_key = api_key or self._first_env_value(self.ENV_API_KEY_KEYS[self.backend])
        self.request_timeout = request_timeout
        if runner is not None:
            self._runner = runner
        else:
            self._runner = {
                RUNNER_GEMINI: self._gemini_runner,
                RUNNER_HTTP: self._http_runner,
                RUNNER_OLLAMA: self._cli_runner,
            }[self.backend]

    def run(self, prompt: str, *, system: str | None = None) -> str:
        """Send the prompt to the configured backend and return the response text.

        Gemini and HTTP responses are returned exactly as generated; only the
        ollama CLI output has its terminating newline removed. Whitespace-only
        responses raise ``LLMError``.
        """
        request = LLMRequest(
            prompt=prompt,
            system=system,
            model=self.model,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            executable=self.executable,
            base_url=self.base_url,
            api_key=self.api_key,
            request_timeout=self.request_timeout,
        )
        return self._runner(request)

    @staticmethod
    def _gemini_runner(request: LLMRequest) -> str:
        if not request.api_key:
            raise LLMError(
                "Gemini runner requires an API key. Set GEMINI_API_KEY or REPORTGEN_LLM_API_KEY."
            )
        http_options = None
        if request.request_timeout:
            http_options = genai_types.HttpOptions(timeout=int(request.request_timeout * 1000))
        client = genai.Client(api_key=request.api_key, http_options=http_options)
        config = genai_types.GenerateContentConfig(
            system_instruction=request.system,
            temperature=request.temperature,
            max_output_tokens=request.max_tokens,
        )
        try:
            response = client.models.generate_content(
                model=request.model,
                contents=request.prompt,
                config=config,
            )
        except genai_errors.APIError as exc:
            raise LLMError(f"Gemini request failed with status {exc.code}: {exc.message}") from exc
        text = response.text
        if not text or not text.strip():
            raise LLMError("Gemini returned an empty response")
        return text

    @staticmethod
    def _cli_runner(request: LLMRequest) -> str:
        args = [request.executable or "ollama", "run", request.model]
        prompt = request.prompt
        if request.system:
            prompt = f"{request.system.strip()}\n\n{prompt}"
        args.append(prompt)
        try:
            completed = subprocess.run(
                args,
                check=True,
                capture_output=True,
                text=True,
                timeout=request.request_timeout,
            )
        except FileNotFoundError as exc:  # pragma: no cover - depends on environment
            raise LLMError(
                f"Unable to locate '{request.executable}'. Install Ollama or choose another runner."
            ) from exc
        except subprocess.CalledProcessError as exc:  # pragma: no cover - depends on environment
            raise LLMError(
                f"LLM runner failed with exit code {exc.returncode}: {exc.stderr.strip()}"
            ) from exc
        except subprocess.TimeoutExpired as exc:  # pragma: no cover - depends on environment
            raise LLMError(f"LLM runner timed out after {exc.timeout} seconds") from exc
        # ollama terminates its answer with a newline.
        return completed.stdout.strip()

    @staticmethod
    def _http_runner(request: LLMRequest) -> str:
        if not request.base_url:
            raise LLMError("HTTP runner requires a base_url to be configured.")
        endpoint = f"{request.base_url}/chat/completions"
        payload: dict[str, object] = {
            "model": request.model,
            "messages": LLMRunner._build_messages(request.system, request.prompt),
        }
        if request.temperature is not None:
            payload["temperature"] = request.temperature
        if request.max_tokens is not None:
            payload["max_tokens"] = request.max_tokens

        data = json.dumps(payload).encode("utf-8")
        headers = {"Content-Type": "application/json"}
        if request.api_key:
            headers["Authorization"] = f"Bearer {request.api_key}"

        http_request = Request(endpoint, data=data, headers=headers, method="POST")
        timeout = request.request_timeout or 120.0

        try:
            with urlopen(http_request, timeout=timeout) as response:  # type: ignore[arg-type]
                raw = response.read()
        except HTTPError as exc:  # pragma: no cover - depends on runtime
            detail = exc.read().decode("utf-8", errors="ignore") if hasattr(exc, "read") else ""
            message = detail.strip() or exc.reason
            raise LLMError(f"LLM HTTP runner failed with status {exc.code}: {message}") from exc
        except URLError as exc:  # pragma: no cover - depends on runtime
            raise LLMError(f"LLM HTTP runner failed: {exc.reason}") from exc

        try:
            response_payload = json.loads(raw.decode("utf-8"))
        except json.JSONDecodeError as exc:
            raise LLMError("LLM HTTP runner returned invalid JSON") from exc

        content = LLMRunner._extract_content(response_payload)
        if not content or not content.strip():
            raise LLMError("LLM HTTP runner returned an empty response")
        return content

    @staticmethod
    def _build_messages(system: str | None, prompt: str) -> list[dict[str, str]]:
        messages: list[dict[str, str]] = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})
        return messages

    @staticmethod
    def _extract_content(payload: dict[str, object]) -> str:
        choices = payload.get("choices")
        if not isinstance(choices, list) or not choices:
            return ""
        first = choices[0]
        if not isinstance(first, dict):
            return ""
        message = first.get("message")
        if isinstance(message, dict):
            content = message.get("content")
            if isinstance(content, str):
                return content
        text = first.get("text")
        if isinstance(text, str):
            return text
        return ""

    def _resolve_backend(self, backend: str | None) -> str:
        name = (backend or self._first_env_value(self.ENV_RUNNER_KEYS) or self.DEFAULT_RUNNER).lower()
        if name not in RUNNER_NAMES:
            raise LLMError(
                f"Unknown LLM runner '{name}'. Expected one of: {', '.join(RUNNER_NAMES)}."
            )
        return name

    def _resolve_base_url(self, base_url: str | None) -> str | None:
        if self.backend != RUNNER_HTTP:
            return base_url
        value = base_url or self._first_env_value(self.ENV_BASE_URL_KEYS) or self.DEFAULT_BASE_URL
        return value.rstrip("/")

    def _first_env_value(self, keys: Sequence[str]) -> str | None:
        for key in keys:
            value = self._environ.get(key)
            if value:
                return value
        return None


__all__ = ["LLMRequest", "LLMRunner", "RUNNER_NAMES"]
