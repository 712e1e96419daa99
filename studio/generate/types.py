# Typed dataclasses shared by the gateway, dispatcher and model clients.

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union


class Mode(str, Enum):
    """Selects the prompt template and output handling for a request."""
    CHAT = "chat"
    CODE = "code"
    ANALYZE = "analyze"
    FIREBASE_FUNCTION = "firebase_function"
    JAVA = "java"
    JAVA_APP = "java_app"
    PROJECT_PLAN = "project_plan"
    COMPONENT = "component"
    API = "api"
    DATABASE_SCHEMA = "database_schema"


@dataclass(frozen=True)
class ConversationTurn:
    """Single prior turn supplied by the caller: user or assistant."""
    role: str
    content: str


@dataclass
class ModelParams:
    """LLM parameters per request."""
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None


AuxValue = Union[str, List[str]]


@dataclass
class GenerationRequest:
    mode: Mode
    primary_text: str
    auxiliary_parameters: Mapping[str, AuxValue] = field(default_factory=dict)


@dataclass
class GenerationResult:
    """Model output; ``structured`` is only set by modes with a JSON contract."""
    raw_text: str
    structured: Optional[Dict[str, Any]] = None
    parse_error: Optional[str] = None
    meta: Dict[str, Any] = field(default_factory=dict)
