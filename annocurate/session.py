"""Presentation-independent correction session.

Each user action takes the current :class:`SessionState` and returns an
:class:`ActionResult` carrying the new state, the rebuilt curation segment
and the effects the presentation layer should apply (re-render, refresh the
page label, show an alert).  Errors from the core are returned on the result
instead of being raised; the previous state is handed back unchanged.

The segment and the page label are always derived from the single canonical
state after a successful move, so there is nothing to keep in sync between
actions.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Callable, Iterable, Optional, Tuple

from .config import LTR, RTL, CurationConfig
from .errors import CurationError, DocumentNotEditable, InvalidNavigation, NoDocumentSelected, SnapshotUnavailable
from .navigator import DocumentNavigator
from .sentences import SentenceIndex
from .shared.models import ANNOTATION_IN_PROGRESS, FINISHED, NEW, Preference
from .snapshots import Annotation
from .suggestions import CurationSegment, SuggestionAggregator
from .window import WindowCursor, WindowMove

if TYPE_CHECKING:  # pragma: no cover
    from .store import DocumentStore

LOGGER = logging.getLogger(__name__)

CORRECTION = "correction"
CURATION = "curation"

RENDER = "render"
UPDATE_LABEL = "update_label"
ALERT = "alert"


@dataclass(frozen=True)
class SessionState:
    project_id: str
    username: str
    doc_id: Optional[str] = None
    anchor: int = 1
    window_size: int = 10
    script_direction: str = LTR
    mode: str = CORRECTION

    @property
    def has_document(self) -> bool:
        return self.doc_id is not None


@dataclass(frozen=True)
class Effect:
    kind: str
    message: str = ""


@dataclass(frozen=True)
class ActionResult:
    state: SessionState
    segment: Optional[CurationSegment] = None
    effects: Tuple[Effect, ...] = ()
    error: Optional[CurationError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def changed(self) -> bool:
        return any(effect.kind == RENDER for effect in self.effects)

    @property
    def alerts(self) -> Tuple[str, ...]:
        return tuple(effect.message for effect in self.effects if effect.kind == ALERT)


class CorrectionSession:
    def __init__(
        self,
        store: "DocumentStore",
        *,
        config: CurationConfig | None = None,
        sentence_index: SentenceIndex | None = None,
        aggregator: SuggestionAggregator | None = None,
    ) -> None:
        self.store = store
        self.config = config or CurationConfig()
        self.sentence_index = sentence_index or SentenceIndex(store)
        self.aggregator = aggregator or SuggestionAggregator(store)

    def start(self, project_id: str, username: str, *, mode: str = CORRECTION) -> SessionState:
        if mode not in (CORRECTION, CURATION):
            raise ValueError(f"Unknown session mode: {mode}")
        return SessionState(
            project_id=project_id,
            username=username,
            window_size=self.config.window_size,
            script_direction=self.config.script_direction,
            mode=mode,
        )

    # ------------------------------ derived ------------------------------- #

    def navigator(self, state: SessionState) -> DocumentNavigator:
        return DocumentNavigator(self.store, state.project_id, state.username)

    def cursor(self, state: SessionState) -> WindowCursor:
        if not state.has_document:
            raise NoDocumentSelected()
        return WindowCursor.from_index(self.sentence_index, state.doc_id, state.window_size, state.anchor)

    def build_segment(self, state: SessionState) -> CurationSegment:
        cursor = self.cursor(state)
        if state.mode == CURATION:
            users = self.aggregator.users_for_curation(state.doc_id)
        else:
            users = [state.username]
        if cursor.sentence_count == 0:
            return self.aggregator.build(state.doc_id, 0, 0, users, include_correction=True)
        return self.aggregator.build_for_window(state.doc_id, cursor.window, users, include_correction=True)

    def status_label(self, state: SessionState) -> str:
        if not state.has_document:
            return ""
        cursor = self.cursor(state)
        navigator = self.navigator(state)
        documents = navigator.documents()
        doc_index = next(
            (idx + 1 for idx, document in enumerate(documents) if document.doc_id == state.doc_id), "-"
        )
        if cursor.sentence_count:
            window = cursor.window
            first, last = window.first, window.last
        else:
            first = last = 0
        return (
            f"showing {first}-{last} of {cursor.sentence_count} sentences "
            f"[document {doc_index} of {len(documents)}]"
        )

    def is_editable(self, state: SessionState) -> bool:
        if not state.has_document:
            return False
        return self.store.annotation_state(state.doc_id, state.username) != FINISHED

    # ------------------------------ documents ----------------------------- #

    def open_document(self, state: SessionState, doc_id: str) -> ActionResult:
        LOGGER.info("BEGIN LOAD_DOCUMENT_ACTION %s for %s", doc_id, state.username)
        try:
            document = self.store.get_source_document(doc_id)
        except ValueError as exc:
            return self._failed(state, InvalidNavigation(str(exc)))
        if document.project_id != state.project_id:
            return self._failed(
                state, InvalidNavigation(f"Document {doc_id} does not belong to project {state.project_id}")
            )
        try:
            own = self.store.read_annotation_snapshot(doc_id, state.username)
        except SnapshotUnavailable as exc:
            LOGGER.error("Unable to load data: %s", exc)
            return self._failed(state, exc)
        self.store.create_or_get_annotation_document(doc_id, state.username)
        if not self.store.exists_correction_snapshot(doc_id):
            self.store.write_curation_snapshot(doc_id, state.username, ())
        if own is None:
            self.store.write_annotation_snapshot(doc_id, state.username, ())

        window_size = state.window_size
        direction = state.script_direction
        preference = self.store.get_preferences(state.username, state.project_id)
        if preference is not None:
            window_size = preference.window_size
            direction = preference.script_direction

        if document.state == NEW:
            self.store.transition_document_state(doc_id, NEW, ANNOTATION_IN_PROGRESS)
        self.store.log_event(state.username, "document_opened", {"doc_id": doc_id, "mode": state.mode})

        new_state = replace(
            state, doc_id=doc_id, anchor=1, window_size=window_size, script_direction=direction
        )
        result = self._rendered(new_state)
        LOGGER.debug(
            "Configured window for user [%s] f:[%d] size:[%d]",
            state.username,
            new_state.anchor,
            new_state.window_size,
        )
        LOGGER.info("END LOAD_DOCUMENT_ACTION")
        return result

    def next_document(self, state: SessionState) -> ActionResult:
        return self._document_action(state, lambda navigator, doc_id: navigator.next(doc_id))

    def previous_document(self, state: SessionState) -> ActionResult:
        return self._document_action(state, lambda navigator, doc_id: navigator.previous(doc_id))

    def _document_action(self, state: SessionState, step: Callable) -> ActionResult:
        if not state.has_document:
            return self._failed(state, NoDocumentSelected())
        try:
            target = step(self.navigator(state), state.doc_id)
        except InvalidNavigation as exc:
            return self._failed(state, exc)
        return self.open_document(state, target.doc_id)

    def finish_document(self, state: SessionState) -> ActionResult:
        if not state.has_document:
            return self._failed(state, NoDocumentSelected())
        self.store.set_annotation_state(state.doc_id, state.username, FINISHED)
        return self._rendered(state)

    # -------------------------------- pages ------------------------------- #

    def next_page(self, state: SessionState) -> ActionResult:
        return self._page_action(state, lambda cursor: cursor.next_window())

    def previous_page(self, state: SessionState) -> ActionResult:
        return self._page_action(state, lambda cursor: cursor.previous_window())

    def first_page(self, state: SessionState) -> ActionResult:
        return self._page_action(state, lambda cursor: cursor.first_window())

    def last_page(self, state: SessionState) -> ActionResult:
        return self._page_action(state, lambda cursor: cursor.last_window())

    def goto_sentence(self, state: SessionState, number: int) -> ActionResult:
        return self._page_action(state, lambda cursor: cursor.goto_sentence_number(number))

    def goto_offset(self, state: SessionState, offset: int) -> ActionResult:
        """Show the window holding the sentence at character ``offset``."""
        if not state.has_document:
            return self._failed(state, NoDocumentSelected())
        try:
            sentence = self.sentence_index.sentence_at(state.doc_id, offset)
        except InvalidNavigation as exc:
            return self._failed(state, exc)
        return self.goto_sentence(state, sentence.number)

    def _page_action(self, state: SessionState, move: Callable[[WindowCursor], WindowMove]) -> ActionResult:
        if not state.has_document:
            return self._failed(state, NoDocumentSelected())
        try:
            outcome = move(self.cursor(state))
        except InvalidNavigation as exc:
            return self._failed(state, exc)
        if not outcome.changed:
            effects = (Effect(ALERT, outcome.boundary),) if outcome.boundary else ()
            return ActionResult(state=state, effects=effects)
        return self._rendered(replace(state, anchor=outcome.window.first))

    # ------------------------------- editing ------------------------------ #

    def toggle_script_direction(self, state: SessionState) -> ActionResult:
        direction = RTL if state.script_direction == LTR else LTR
        new_state = replace(state, script_direction=direction)
        if not new_state.has_document:
            return ActionResult(state=new_state)
        return self._rendered(new_state)

    def save_preferences(self, state: SessionState) -> None:
        self.store.set_preferences(
            Preference(
                username=state.username,
                project_id=state.project_id,
                window_size=state.window_size,
                script_direction=state.script_direction,
            )
        )

    def save_annotations(self, state: SessionState, annotations: Iterable[Annotation]) -> ActionResult:
        if not state.has_document:
            return self._failed(state, NoDocumentSelected())
        if not self.is_editable(state):
            return self._failed(state, DocumentNotEditable(state.doc_id, state.username))
        self.store.write_annotation_snapshot(state.doc_id, state.username, annotations)
        return self._rendered(state)

    def save_correction(self, state: SessionState, annotations: Iterable[Annotation]) -> ActionResult:
        if not state.has_document:
            return self._failed(state, NoDocumentSelected())
        if not self.is_editable(state):
            return self._failed(state, DocumentNotEditable(state.doc_id, state.username))
        self.store.write_curation_snapshot(state.doc_id, state.username, annotations)
        return self._rendered(state)

    def refresh(self, state: SessionState) -> ActionResult:
        if not state.has_document:
            return self._failed(state, NoDocumentSelected())
        return self._rendered(state)

    # ------------------------------- helpers ------------------------------ #

    def _rendered(self, state: SessionState) -> ActionResult:
        segment = self.build_segment(state)
        return ActionResult(
            state=state,
            segment=segment,
            effects=(Effect(RENDER), Effect(UPDATE_LABEL, self.status_label(state))),
        )

    def _failed(self, state: SessionState, error: CurationError) -> ActionResult:
        LOGGER.info("%s: %s", type(error).__name__, error)
        return ActionResult(state=state, effects=(Effect(ALERT, str(error)),), error=error)
