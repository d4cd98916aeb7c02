from __future__ import annotations

import json
import math
from dataclasses import dataclass
from typing import Any, List


class MessageDecodeError(ValueError):
    def __init__(self, reason: str, payload: bytes) -> None:
        super().__init__(reason)
        self.reason = reason
        self.payload = payload

    def payload_text(self) -> str:
        return self.payload.decode("utf-8", errors="replace")


@dataclass(frozen=True)
class MetricUpdate:
    name: str
    kind: str
    value: float
    biased: bool = False


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(float(value))
    except OverflowError:
        return False


def _decode_record(raw: Any, index: int, payload: bytes) -> MetricUpdate:
    if not isinstance(raw, dict):
        raise MessageDecodeError(f"record {index} is not an object", payload)
    name = raw.get("name")
    if not isinstance(name, str) or not name:
        raise MessageDecodeError(f"record {index} has no name", payload)
    kind = raw.get("type")
    if not isinstance(kind, str):
        raise MessageDecodeError(f"record {index} has no type", payload)
    value = raw.get("value")
    if not _is_number(value):
        raise MessageDecodeError(f"record {index} has non-numeric value", payload)
    biased = raw.get("biased", False)
    if biased is None:
        biased = False
    if not isinstance(biased, bool):
        raise MessageDecodeError(f"record {index} has non-boolean biased flag", payload)
    return MetricUpdate(name=name, kind=kind.lower(), value=float(value), biased=biased)


def decode_message(payload: bytes) -> List[MetricUpdate]:
    """Decode one datagram into its ordered metric updates.

    The batch is all-or-nothing: any malformed record rejects the whole
    payload with :class:`MessageDecodeError`. Unknown ``type`` strings pass
    through untouched; the registry decides what to do with them.
    """
    try:
        text = payload.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise MessageDecodeError(f"invalid utf-8: {exc}", payload) from exc
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MessageDecodeError(f"invalid json: {exc}", payload) from exc
    if not isinstance(data, list):
        raise MessageDecodeError("top-level value is not an array", payload)
    return [_decode_record(raw, index, payload) for index, raw in enumerate(data)]


__all__ = ["MessageDecodeError", "MetricUpdate", "decode_message"]
