"""Injectable sources of identifiers and time for the few renderers that need them."""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, Protocol

from archgen.schemas.config import GenerationConfig

ARCHGEN_NAMESPACE = uuid.UUID("6f1c8a52-3b1e-4c55-9a57-0d6a2f8e4b10")


class IdentifierProvider(Protocol):
    def guid(self, label: str) -> uuid.UUID: ...


class RandomIdentifiers:
    """Random GUIDs, stable per label within one provider instance."""

    def __init__(self) -> None:
        self._issued: Dict[str, uuid.UUID] = {}

    def guid(self, label: str) -> uuid.UUID:
        if label not in self._issued:
            self._issued[label] = uuid.uuid4()
        return self._issued[label]


class NameBasedIdentifiers:
    """GUIDs derived from a seed and the label, identical across runs."""

    def __init__(self, seed: str) -> None:
        self.seed = seed

    def guid(self, label: str) -> uuid.UUID:
        return uuid.uuid5(ARCHGEN_NAMESPACE, f"{self.seed}:{label}")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class RenderContext:
    ids: IdentifierProvider = field(default_factory=RandomIdentifiers)
    clock: Callable[[], datetime] = utc_now

    @classmethod
    def for_config(cls, config: GenerationConfig) -> "RenderContext":
        if config.deterministic_identifiers:
            return cls(ids=NameBasedIdentifiers(config.root_namespace))
        return cls()
