"""Annotation records and the per-user snapshot payload format.

A snapshot is stored as a JSON document of the form::

    {"annotations": [{"annotation_id": ..., "layer": ..., "kind": "span", ...}]}

Decoding is strict: anything that does not round trip into
:class:`Annotation` objects raises ``ValueError`` so the store can report the
snapshot as unavailable instead of handing out partial data.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from .utils import canonical_json

SPAN = "span"
RELATION = "relation"
ANNOTATION_KINDS = (SPAN, RELATION)


@dataclass(frozen=True)
class Annotation:
    annotation_id: str
    layer: str
    begin: int
    end: int
    label: Optional[str] = None
    kind: str = SPAN
    features: Mapping[str, str] = field(default_factory=dict)
    source_id: Optional[str] = None
    target_id: Optional[str] = None

    def __post_init__(self) -> None:
        if self.kind not in ANNOTATION_KINDS:
            raise ValueError(f"Unknown annotation kind: {self.kind}")
        if self.begin < 0 or self.end < self.begin:
            raise ValueError(f"Invalid offsets [{self.begin}, {self.end}) for {self.annotation_id}")
        if self.kind == RELATION and not (self.source_id and self.target_id):
            raise ValueError(f"Relation {self.annotation_id} needs both source_id and target_id")

    @property
    def position(self) -> Tuple[str, str, int, int]:
        return (self.layer, self.kind, self.begin, self.end)

    def within(self, begin: int, end: int) -> bool:
        """True when the annotation lies inside the half-open range ``[begin, end)``."""
        return begin <= self.begin < end and self.end <= end

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "annotation_id": self.annotation_id,
            "layer": self.layer,
            "kind": self.kind,
            "begin": self.begin,
            "end": self.end,
            "label": self.label,
            "features": dict(self.features),
        }
        if self.kind == RELATION:
            data["source_id"] = self.source_id
            data["target_id"] = self.target_id
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Annotation":
        if not isinstance(data, Mapping):
            raise ValueError(f"Annotation entry must be an object, got {type(data).__name__}")
        try:
            annotation_id = str(data["annotation_id"])
            layer = str(data["layer"])
            begin = int(data["begin"])
            end = int(data["end"])
        except (KeyError, TypeError, ValueError) as exc:
            raise ValueError(f"Malformed annotation entry: {exc}") from exc
        raw_features = data.get("features") or {}
        if not isinstance(raw_features, Mapping):
            raise ValueError(f"Features of {annotation_id} must be an object")
        label = data.get("label")
        return cls(
            annotation_id=annotation_id,
            layer=layer,
            begin=begin,
            end=end,
            label=None if label is None else str(label),
            kind=str(data.get("kind") or SPAN),
            features={str(k): str(v) for k, v in raw_features.items()},
            source_id=data.get("source_id"),
            target_id=data.get("target_id"),
        )


@dataclass(frozen=True)
class AnnotationSnapshot:
    doc_id: str
    username: str
    version: int
    annotations: Tuple[Annotation, ...]
    updated_at: str

    def within(self, begin: int, end: int) -> Tuple[Annotation, ...]:
        selected = [annotation for annotation in self.annotations if annotation.within(begin, end)]
        selected.sort(key=lambda a: (a.begin, a.end, a.layer, a.annotation_id))
        return tuple(selected)


def encode_payload(annotations: Iterable[Annotation]) -> str:
    return canonical_json({"annotations": [annotation.to_dict() for annotation in annotations]})


def decode_payload(payload_json: str) -> Tuple[Annotation, ...]:
    try:
        data = json.loads(payload_json)
    except (TypeError, json.JSONDecodeError) as exc:
        raise ValueError(f"Snapshot payload is not valid JSON: {exc}") from exc
    if not isinstance(data, Mapping) or not isinstance(data.get("annotations"), list):
        raise ValueError("Snapshot payload has no annotation list")
    return tuple(Annotation.from_dict(entry) for entry in data["annotations"])
