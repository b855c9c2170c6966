"""Merge per-user annotation snapshots into a reviewable curation segment.

The aggregator is read-only with respect to other users' data: it reads each
requested snapshot once, keeps the annotations that fall inside the visible
window, and isolates failures per user.  A corrupt snapshot for one annotator
drops that annotator from the segment and is logged; it never aborts the
merge for everybody else.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, Iterable, List, Mapping, Optional, Tuple

import pandas as pd

from .errors import SnapshotUnavailable
from .metrics import percent_agreement
from .shared.models import FINISHED
from .snapshots import Annotation

if TYPE_CHECKING:  # pragma: no cover
    from .store import DocumentStore
    from .window import VisibleWindow

LOGGER = logging.getLogger(__name__)

CORRECTION_USER = "CORRECTION_USER"

Position = Tuple[str, str, int, int]

SEGMENT_COLUMNS = [
    "username",
    "annotation_id",
    "layer",
    "kind",
    "begin",
    "end",
    "label",
    "source_id",
    "target_id",
]


@dataclass(frozen=True)
class CurationSegment:
    doc_id: str
    begin: int
    end: int
    annotations_by_user: Mapping[str, Tuple[Annotation, ...]] = field(default_factory=dict)
    missing_users: Tuple[str, ...] = ()
    failed_users: Tuple[str, ...] = ()

    @property
    def users(self) -> Tuple[str, ...]:
        return tuple(self.annotations_by_user)

    def positions(self) -> Dict[Position, Dict[str, Tuple[str, ...]]]:
        """Group labels by position, then by user."""
        grouped: Dict[Position, Dict[str, List[str]]] = {}
        for username, annotations in self.annotations_by_user.items():
            for annotation in annotations:
                per_user = grouped.setdefault(annotation.position, {})
                per_user.setdefault(username, []).append(annotation.label or "")
        return {
            position: {user: tuple(sorted(labels)) for user, labels in per_user.items()}
            for position, per_user in sorted(grouped.items())
        }

    def _position_values(self) -> Dict[Position, List[Optional[str]]]:
        values: Dict[Position, List[Optional[str]]] = {}
        for position, per_user in self.positions().items():
            values[position] = [
                "|".join(per_user[user]) if user in per_user else None for user in self.users
            ]
        return values

    def disagreements(self) -> List[Position]:
        """Positions where the contributing users do not all carry the same labels."""
        return [
            position
            for position, values in self._position_values().items()
            if len(set(values)) > 1
        ]

    def agreement(self) -> float:
        values = self._position_values()
        if not values:
            return 1.0
        return percent_agreement(values.values())

    def to_frame(self) -> pd.DataFrame:
        rows = [
            {
                "username": username,
                "annotation_id": annotation.annotation_id,
                "layer": annotation.layer,
                "kind": annotation.kind,
                "begin": annotation.begin,
                "end": annotation.end,
                "label": annotation.label,
                "source_id": annotation.source_id,
                "target_id": annotation.target_id,
            }
            for username, annotations in self.annotations_by_user.items()
            for annotation in annotations
        ]
        return pd.DataFrame(rows, columns=SEGMENT_COLUMNS)


class SuggestionAggregator:
    def __init__(self, store: "DocumentStore") -> None:
        self.store = store

    def users_for_curation(self, doc_id: str) -> List[str]:
        """Users whose annotation of ``doc_id`` is finished."""
        return [record.username for record in self.store.annotation_documents(doc_id) if record.state == FINISHED]

    def build(
        self,
        doc_id: str,
        begin: int,
        end: int,
        usernames: Iterable[str],
        *,
        include_correction: bool = False,
    ) -> CurationSegment:
        if begin > end:
            raise ValueError(f"Segment begin {begin} is after end {end}")
        by_user: Dict[str, Tuple[Annotation, ...]] = {}
        missing: List[str] = []
        failed: List[str] = []
        for username in dict.fromkeys(usernames):
            try:
                snapshot = self.store.read_annotation_snapshot(doc_id, username)
            except SnapshotUnavailable as exc:
                LOGGER.warning("Dropping %s from segment of %s: %s", username, doc_id, exc.reason)
                failed.append(username)
                continue
            if snapshot is None:
                missing.append(username)
                continue
            by_user[username] = snapshot.within(begin, end)
        if include_correction:
            try:
                correction = self.store.read_curation_snapshot(doc_id)
            except SnapshotUnavailable as exc:
                LOGGER.warning("Correction snapshot of %s unavailable: %s", doc_id, exc.reason)
                failed.append(CORRECTION_USER)
            else:
                by_user[CORRECTION_USER] = correction.within(begin, end)
        LOGGER.debug(
            "Built segment %s [%d, %d) users=%s missing=%s failed=%s",
            doc_id,
            begin,
            end,
            list(by_user),
            missing,
            failed,
        )
        return CurationSegment(
            doc_id=doc_id,
            begin=begin,
            end=end,
            annotations_by_user=by_user,
            missing_users=tuple(missing),
            failed_users=tuple(failed),
        )

    def build_for_window(
        self,
        doc_id: str,
        window: "VisibleWindow",
        usernames: Iterable[str],
        *,
        include_correction: bool = False,
    ) -> CurationSegment:
        return self.build(doc_id, window.begin, window.end, usernames, include_correction=include_correction)
