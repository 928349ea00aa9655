"""
Shared list-view controller: fetch → normalize → filter/aggregate → create.

Each resource view holds its own snapshot of the base collection. Filtering
is recomputed on access; summaries always read the full base collection so
they do not move when a filter is applied.
"""

import logging
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from housing_portal.api.client import ResourceClient
from housing_portal.core.action_state import (
    ActionState, Failed, IDLE, PENDING, Succeeded, is_pending,
)
from housing_portal.core.domain_models import ALL
from housing_portal.core.errors import PortalError, ValidationError
from housing_portal.core.money import coerce_float, coerce_int
from housing_portal.core.utils import matches_search


logger = logging.getLogger(__name__)


class LoadState(Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    ERRORED = "errored"


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class ListView:
    """
    Base controller for one resource list.

    Subclasses declare:
        resource: API resource name
        model: domain dataclass with from_dict()
        search_fields: attributes matched by the text search
        filter_fields: categorical filters (attribute names)
        draft_defaults / required_fields / int_fields / float_fields:
            shape and coercion of the create form
        refresh_strategy: "append" the created record or "refetch" the list
    """

    resource: str = ""
    model = None
    search_fields: Tuple[str, ...] = ()
    filter_fields: Tuple[str, ...] = ()
    draft_defaults: Dict[str, Any] = {}
    required_fields: Tuple[str, ...] = ()
    int_fields: Tuple[str, ...] = ()
    float_fields: Tuple[str, ...] = ()
    refresh_strategy: str = "append"
    read_only: bool = False

    def __init__(self, resources: ResourceClient):
        self.resources = resources
        self.state = LoadState.IDLE
        self.items: List[Any] = []
        self.last_error: Optional[PortalError] = None

        self.search = ""
        self.filters: Dict[str, Any] = {name: ALL for name in self.filter_fields}
        self.selected = None

        self.draft: Dict[str, Any] = self.default_draft()
        self.create_open = False
        self.create_state: ActionState = IDLE

        self._load_seq = 0

    # ---------------------------------------------------------
    # LOADING
    # ---------------------------------------------------------
    def fetch(self) -> List[Dict[str, Any]]:
        return self.resources.list(self.resource)

    def fetch_related(self) -> Dict[str, List[Any]]:
        """Lookup lists (e.g. projects for a picker); attr name → records."""
        return {}

    def load(self) -> LoadState:
        """
        Fetch the base collection.

        Only the most recently started load may land; an older response
        that completes late is discarded.
        """
        self._load_seq += 1
        seq = self._load_seq
        self.state = LoadState.LOADING

        try:
            rows = self.fetch()
            related = self.fetch_related()
        except PortalError as e:
            if seq != self._load_seq:
                logger.debug(f"Ignoring stale {self.resource} failure (load #{seq})")
                return self.state
            logger.error(f"Error fetching {self.resource}: {e}")
            self.items = []
            self.last_error = e
            self.state = LoadState.ERRORED
            return self.state

        if seq != self._load_seq:
            logger.debug(f"Discarding stale {self.resource} response (load #{seq})")
            return self.state

        self.items = [self.model.from_dict(row) for row in rows]
        for attr, records in related.items():
            setattr(self, attr, records)
        self.last_error = None
        self.state = LoadState.LOADED
        return self.state

    # ---------------------------------------------------------
    # FILTERING
    # ---------------------------------------------------------
    def set_search(self, term: Optional[str]) -> None:
        self.search = term or ""

    def set_filter(self, name: str, value: Any) -> None:
        if name not in self.filters:
            raise KeyError(f"{type(self).__name__} has no filter '{name}'")
        self.filters[name] = ALL if value is None else value

    def clear_filters(self) -> None:
        self.search = ""
        self.filters = {name: ALL for name in self.filter_fields}

    def filter_matches(self, record, name: str, value: Any) -> bool:
        return getattr(record, name, None) == value

    def matches(self, record) -> bool:
        fields = (getattr(record, f, None) for f in self.search_fields)
        if not matches_search(self.search, *fields):
            return False

        for name, value in self.filters.items():
            if value == ALL:
                continue
            if not self.filter_matches(record, name, value):
                return False
        return True

    @property
    def visible(self) -> List[Any]:
        return [r for r in self.items if self.matches(r)]

    def summary(self) -> Dict[str, Any]:
        return {"total": len(self.items)}

    # ---------------------------------------------------------
    # SELECTION / UPWARD PATCH
    # ---------------------------------------------------------
    def get(self, record_id) -> Optional[Any]:
        for record in self.items:
            if record.id == record_id:
                return record
        return None

    def select(self, record_id) -> Optional[Any]:
        self.selected = self.get(record_id)
        return self.selected

    def apply_update(self, updated) -> None:
        """Replace the matching record with an updated copy."""
        self.items = [updated if r.id == updated.id else r for r in self.items]
        if self.selected is not None and self.selected.id == updated.id:
            self.selected = updated
        logger.debug(f"Patched {self.resource} record {updated.id}")

    # ---------------------------------------------------------
    # CREATE FLOW
    # ---------------------------------------------------------
    def default_draft(self) -> Dict[str, Any]:
        return dict(self.draft_defaults)

    def open_create(self, **prefill) -> None:
        self.draft = self.default_draft()
        self.draft.update(prefill)
        self.create_state = IDLE
        self.create_open = True

    def close_create(self) -> None:
        self.create_open = False

    def update_draft(self, **values) -> None:
        self.draft.update(values)

    def build_payload(self) -> Dict[str, Any]:
        """
        Validate the draft and coerce numeric form text.

        Raises:
            ValidationError: a required field is blank or a number is invalid
        """
        payload = dict(self.draft)

        for name in self.required_fields:
            if is_blank(payload.get(name)):
                raise ValidationError(f"{_label(name)} is required", field=name)

        for names, coerce, kind in ((self.int_fields, coerce_int, "a whole number"),
                                    (self.float_fields, coerce_float, "a number")):
            for name in names:
                raw = payload.get(name)
                value = coerce(raw)
                if value is None and not is_blank(raw):
                    raise ValidationError(f"{_label(name)} must be {kind}", field=name)
                payload[name] = value

        return payload

    def submit_create(self) -> ActionState:
        """
        Validate, POST and refresh the list.

        On any failure the dialog stays open with the draft intact and the
        error is recorded in create_state.
        """
        if is_pending(self.create_state):
            return self.create_state

        if self.read_only:
            self.create_state = Failed(ValidationError(f"{self.resource} cannot be created here"))
            return self.create_state

        try:
            payload = self.build_payload()
        except ValidationError as e:
            logger.warning(f"Invalid {self.resource} draft: {e}")
            self.create_state = Failed(e)
            return self.create_state

        self.create_state = PENDING
        try:
            self.create_state = self._post_draft(payload)
        finally:
            # Never leave the slot pending, even if an unexpected error escapes
            if is_pending(self.create_state):
                self.create_state = Failed(PortalError(f"Creating {self.resource} did not complete"))
        return self.create_state

    def _post_draft(self, payload: Dict[str, Any]) -> ActionState:
        try:
            created = self.resources.create(self.resource, payload)
        except PortalError as e:
            logger.error(f"Error creating {self.resource}: {e}")
            return Failed(e)

        entity = self.model.from_dict(created)
        if self.refresh_strategy == "append":
            self.items = self.items + [entity]
        else:
            self.load()

        self.draft = self.default_draft()
        self.create_open = False
        return Succeeded(entity)


def _label(name: str) -> str:
    return name.replace("_id", "").replace("_", " ").capitalize()
