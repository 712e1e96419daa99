# Generation package: gateway, prompt templates, model clients.

from .gateway import Gateway
from .types import ConversationTurn, GenerationRequest, GenerationResult, Mode, ModelParams
from .errors import GenerationFailure, GenerationTimeout, InvalidRequest, ProviderError, ProviderTimeout
from .clients.echo_dev_client import EchoDevClient

__all__ = [
    "Gateway",
    "ConversationTurn",
    "GenerationRequest",
    "GenerationResult",
    "Mode",
    "ModelParams",
    "GenerationFailure",
    "GenerationTimeout",
    "InvalidRequest",
    "ProviderError",
    "ProviderTimeout",
    "EchoDevClient",
]
