# Gateway: typed intent -> prompt -> model client -> GenerationResult.
#
# - accepts any model client exposing generate(prompt, params) -> (text, meta)
# - one public method per generation mode, all sharing _call()
# - provider errors never escape: they become GenerationFailure(mode, ...)

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

import yaml

from . import prompts
from .errors import GenerationFailure, GenerationTimeout, ProviderError, ProviderTimeout
from .extract import extract_json_object, missing_keys
from .types import ConversationTurn, GenerationRequest, GenerationResult, Mode, ModelParams

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).with_name("config.yaml")
DEFAULT_HISTORY_MAX_TURNS = 20


class Gateway:
    def __init__(
        self,
        model_client,
        config_path: Optional[str] = None,
        history_max_turns: Optional[int] = None,
    ):
        self.model_client = model_client
        self.config_path = str(config_path or DEFAULT_CONFIG_PATH)
        self.cfg = self._load_config()
        if history_max_turns is None:
            history_max_turns = self.cfg.get("history_max_turns", DEFAULT_HISTORY_MAX_TURNS)
        self.history_max_turns = int(history_max_turns)

    def _load_config(self) -> Dict[str, Any]:
        if not os.path.exists(self.config_path):
            return {}
        with open(self.config_path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}

    def _params_for(self, mode: Mode) -> ModelParams:
        """Global defaults from config.yaml, overridden per mode under ``modes:``."""
        mode_cfg = (self.cfg.get("modes") or {}).get(mode.value, {}) or {}
        return ModelParams(
            temperature=mode_cfg.get("temperature", self.cfg.get("temperature", 0.7)),
            max_tokens=mode_cfg.get("max_tokens", self.cfg.get("max_tokens", 2048)),
        )

    def _call(self, mode: Mode, prompt: str) -> Tuple[str, Dict[str, Any]]:
        params = self._params_for(mode)
        try:
            text, meta = self.model_client.generate(prompt, params)
        except ProviderTimeout as e:
            logger.error("Generation timed out (mode=%s): %s", mode.value, e)
            raise GenerationTimeout(mode.value) from e
        except ProviderError as e:
            logger.error("Provider error (mode=%s, status=%s): %s", mode.value, e.status_code, e)
            raise GenerationFailure(
                mode.value, str(e), retryable=e.is_retryable, retry_after=e.retry_after
            ) from e
        except Exception as e:
            logger.exception("Generation failed (mode=%s)", mode.value)
            raise GenerationFailure(mode.value, str(e) or type(e).__name__) from e
        if not isinstance(text, str):
            raise GenerationFailure(mode.value, f"model returned {type(text).__name__}, expected text")
        return text, dict(meta or {})

    def _result(self, mode: Mode, prompt: str) -> GenerationResult:
        text, meta = self._call(mode, prompt)
        meta["mode"] = mode.value
        return GenerationResult(raw_text=text, meta=meta)

    # -------------------------
    # Conversation
    # -------------------------
    def clip_history(self, history: Sequence[ConversationTurn]) -> Tuple[Sequence[ConversationTurn], bool]:
        if self.history_max_turns <= 0:
            return [], bool(history)
        if len(history) <= self.history_max_turns:
            return history, False
        return history[-self.history_max_turns:], True

    def chat(self, message: str, history: Sequence[ConversationTurn] = ()) -> GenerationResult:
        kept, clipped = self.clip_history(list(history))
        if clipped:
            logger.info("History clipped from %d to %d turns", len(history), len(kept))
        result = self._result(Mode.CHAT, prompts.build_chat_prompt(message, kept))
        result.meta["history_clipped"] = clipped
        return result

    # -------------------------
    # Free-text generation modes
    # -------------------------
    def generate_code(self, language: str, description: str, requirements: Sequence[str] = ()) -> GenerationResult:
        return self._result(Mode.CODE, prompts.build_code_prompt(language, description, requirements))

    def analyze_code(self, code: str, language: str) -> GenerationResult:
        return self._result(Mode.ANALYZE, prompts.build_analysis_prompt(code, language))

    def generate_firebase_function(self, function_name: str, description: str) -> GenerationResult:
        prompt = prompts.build_firebase_function_prompt(function_name, description)
        return self._result(Mode.FIREBASE_FUNCTION, prompt)

    def generate_java_code(self, class_name: str, description: str, features: Sequence[str] = ()) -> GenerationResult:
        return self._result(Mode.JAVA, prompts.build_java_class_prompt(class_name, description, features))

    def generate_java_app(
        self,
        app_name: str,
        description: str,
        features: Sequence[str] = (),
        spring_boot: bool = True,
    ) -> GenerationResult:
        prompt = prompts.build_java_app_prompt(app_name, description, features, spring_boot)
        return self._result(Mode.JAVA_APP, prompt)

    def generate_component(
        self,
        component_name: str,
        description: str,
        framework: str = "react",
        props: Sequence[str] = (),
    ) -> GenerationResult:
        prompt = prompts.build_component_prompt(component_name, description, framework, props)
        return self._result(Mode.COMPONENT, prompt)

    def generate_api(
        self,
        description: str,
        endpoints: Sequence[prompts.Endpoint] = (),
        authentication: bool = True,
    ) -> GenerationResult:
        return self._result(Mode.API, prompts.build_api_prompt(description, endpoints, authentication))

    def generate_database_schema(self, description: str, collections: Sequence[str] = ()) -> GenerationResult:
        return self._result(Mode.DATABASE_SCHEMA, prompts.build_database_schema_prompt(description, collections))

    # -------------------------
    # Structured output
    # -------------------------
    def generate_project_plan(
        self,
        prompt: str,
        project_type: str = "web",
        requirements: Sequence[str] = (),
        build_context: Optional[Mapping[str, Any]] = None,
    ) -> GenerationResult:
        full_prompt = prompts.build_project_plan_prompt(prompt, project_type, requirements, build_context or {})
        result = self._result(Mode.PROJECT_PLAN, full_prompt)
        structured, reason = extract_json_object(result.raw_text)
        if structured is None:
            logger.warning("Project plan not parseable as JSON: %s", reason)
            result.parse_error = reason
            return result
        result.structured = structured
        absent = missing_keys(structured)
        if absent:
            logger.info("Project plan missing keys: %s", ", ".join(absent))
        result.meta["missing_keys"] = absent
        return result

    # -------------------------
    # Generic entry point
    # -------------------------
    def run(self, request: GenerationRequest) -> GenerationResult:
        """Dispatch a GenerationRequest using per-mode auxiliary parameter defaults."""
        aux = request.auxiliary_parameters or {}
        text = request.primary_text
        mode = Mode(request.mode)

        if mode is Mode.CHAT:
            return self.chat(text, [])
        if mode is Mode.CODE:
            return self.generate_code(_text(aux, "language", "javascript"), text, _list(aux, "requirements"))
        if mode is Mode.ANALYZE:
            return self.analyze_code(text, _text(aux, "language", "javascript"))
        if mode is Mode.FIREBASE_FUNCTION:
            return self.generate_firebase_function(_text(aux, "functionName", "generatedFunction"), text)
        if mode is Mode.JAVA:
            return self.generate_java_code(_text(aux, "className", "GeneratedClass"), text, _list(aux, "features"))
        if mode is Mode.JAVA_APP:
            return self.generate_java_app(
                _text(aux, "appName", "GeneratedApp"),
                text,
                _list(aux, "features"),
                _flag(aux, "springBoot", True),
            )
        if mode is Mode.COMPONENT:
            return self.generate_component(
                _text(aux, "componentName", "GeneratedComponent"),
                text,
                _text(aux, "framework", "react"),
                _list(aux, "props"),
            )
        if mode is Mode.API:
            return self.generate_api(text, _list(aux, "endpoints"), _flag(aux, "authentication", True))
        if mode is Mode.DATABASE_SCHEMA:
            return self.generate_database_schema(text, _list(aux, "collections"))
        return self.generate_project_plan(text, _text(aux, "projectType", "web"), _list(aux, "requirements"))


def _text(aux: Mapping[str, Any], key: str, default: str) -> str:
    value = aux.get(key)
    if isinstance(value, list):
        value = ", ".join(value)
    return value or default


def _list(aux: Mapping[str, Any], key: str) -> list:
    value = aux.get(key)
    if value is None or value == "":
        return []
    if isinstance(value, str):
        return [value]
    return list(value)


def _flag(aux: Mapping[str, Any], key: str, default: bool) -> bool:
    value = aux.get(key)
    if value is None:
        return default
    if isinstance(value, list):
        value = value[0] if value else ""
    return str(value).strip().lower() in ("1", "true", "yes", "on")
