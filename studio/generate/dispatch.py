# Fixed mode lookup for the /chat endpoint.
# Unknown or missing modes fall back to plain chat; that fallback is part of
# the public contract, not an error.

from __future__ import annotations

import logging
from typing import Callable, Dict, Optional, Sequence

from .gateway import Gateway
from .types import ConversationTurn, GenerationResult

logger = logging.getLogger(__name__)

DEFAULT_CHAT_MODE = "chat"

CODE_REQUIREMENTS = ["Clean, readable code", "Error handling", "Best practices"]
JAVA_FEATURES = ["Modern Java patterns", "Documentation", "Unit tests"]

ChatHandler = Callable[[Gateway, str, Sequence[ConversationTurn]], GenerationResult]

CHAT_MODES: Dict[str, ChatHandler] = {
    "chat": lambda gw, message, history: gw.chat(message, history),
    "code": lambda gw, message, history: gw.generate_code("javascript", message, CODE_REQUIREMENTS),
    "java": lambda gw, message, history: gw.generate_java_code("GeneratedClass", message, JAVA_FEATURES),
    "firebase": lambda gw, message, history: gw.generate_firebase_function("generatedFunction", message),
    "analyze": lambda gw, message, history: gw.analyze_code(message, "javascript"),
}


def resolve_chat_mode(mode: Optional[str]) -> str:
    if mode in CHAT_MODES:
        return mode
    if mode:
        logger.info("Unknown chat mode %r, falling back to %r", mode, DEFAULT_CHAT_MODE)
    return DEFAULT_CHAT_MODE


def dispatch_chat(
    gateway: Gateway,
    message: str,
    mode: Optional[str] = None,
    history: Sequence[ConversationTurn] = (),
) -> GenerationResult:
    handler = CHAT_MODES[resolve_chat_mode(mode)]
    return handler(gateway, message, history)
