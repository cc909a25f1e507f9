"""Base agent class for intent-detection backends."""

from abc import ABC, abstractmethod
from typing import Dict, List, Type

from app.schemas.messages import IntentRequest, ResponseSegment


class IntentDetectionError(Exception):
    """The intent-detection service could not be reached or rejected the call."""


class BaseAgent(ABC):
    @abstractmethod
    def session_path(self, session_id: str) -> str:
        pass

    @abstractmethod
    async def detect_intent(self, request: IntentRequest) -> List[ResponseSegment]:
        pass

    async def close(self) -> None:
        pass


_REGISTRY: Dict[str, Type[BaseAgent]] = {}


def register_agent(name: str, cls: Type[BaseAgent]) -> None:
    _REGISTRY[name] = cls


def get_agent(name: str) -> Type[BaseAgent]:
    if name not in _REGISTRY:
        raise ValueError(f"Unknown agent backend: {name}. Available: {list(_REGISTRY)}")
    return _REGISTRY[name]
