"""
Resource synchronizer: one screen's private, sorted copy of a backend collection.

Every mutation goes to the server first. Only the server's answer is written
back into the local list, which is re-sorted after each change.
"""
import copy
import json
import logging
import threading
from contextlib import contextmanager
from typing import Callable, Iterable, List, Optional, Union

from core.api_client import ApiClient
from core.errors import RequestInProgress, ServerError, ValidationError
from core.image_pipeline import MediaAsset, prepare_upload
from core.resources import BASE64, MULTIPART, ResourceSpec

logger = logging.getLogger(__name__)

Media = Union[MediaAsset, bytes, None]


def same_id(a, b) -> bool:
    """Ids arrive as ints from JSON and as strings from forms."""
    return a == b or (a is not None and b is not None and str(a) == str(b))


def form_value(value) -> str:
    """Stringify a field for a multipart form part."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple, dict)):
        return json.dumps(list(value) if isinstance(value, tuple) else value)
    return str(value)


class ResourceSynchronizer:
    """
    Keeps ``items`` consistent with the backend for one resource type.

    Args:
        api: Authenticated client (carries the injected session)
        spec: Endpoint, id field, sort rule and image transport
        audit: Optional callback(admin_email, resource, action, resource_id)
    """

    CREATE_KEY = "__create__"

    def __init__(self, api: ApiClient, spec: ResourceSpec, audit: Optional[Callable] = None):
        self.api = api
        self.spec = spec
        self.audit = audit
        self.closed = False
        self._items: List[dict] = []
        self._pending = set()
        self._lock = threading.Lock()

    # ===================== READ ACCESS =====================

    @property
    def items(self) -> List[dict]:
        return list(self._items)

    def __len__(self):
        return len(self._items)

    def __iter__(self):
        return iter(list(self._items))

    def snapshot(self) -> List[dict]:
        """Deep copy of the collection, safe to keep across mutations."""
        return copy.deepcopy(self._items)

    def id_of(self, item: dict):
        return item.get(self.spec.id_field)

    def get(self, resource_id) -> Optional[dict]:
        for item in self._items:
            if same_id(self.id_of(item), resource_id):
                return item
        return None

    # ===================== IN-FLIGHT GUARD =====================

    @contextmanager
    def pending(self, key):
        """Allow one outstanding mutation per resource id."""
        key = str(key)
        with self._lock:
            if key in self._pending:
                raise RequestInProgress()
            self._pending.add(key)
        try:
            yield
        finally:
            with self._lock:
                self._pending.discard(key)

    def is_pending(self, key) -> bool:
        with self._lock:
            return str(key) in self._pending

    def close(self):
        """Detach from the screen; late responses are no longer reconciled."""
        self.closed = True

    # ===================== OPERATIONS =====================

    def fetch_all(self) -> Optional[List[dict]]:
        """Replace the collection with the server's list (all or nothing)."""
        body = self.api.get(self.spec.endpoint)
        data = body.get("data")
        if data is None:
            data = []
        if not isinstance(data, list):
            raise ServerError(f"Unexpected response while loading {self.spec.name}")
        if self.closed:
            return None
        self._items = self._sorted(self._dedupe(data))
        logger.info("Loaded %d %s", len(self._items), self.spec.name)
        return self.items

    def fetch_one(self, resource_id) -> Optional[dict]:
        """Load the full record for one entry (list endpoints may trim fields)."""
        body = self.api.get(self.spec.detail_path(resource_id))
        item = body.get("data")
        if not isinstance(item, dict):
            raise ServerError(f"Unexpected response while loading {self.spec.label or self.spec.name}")
        if self.closed:
            return None
        self.reconcile(resource_id, item)
        return item

    def create(self, payload: dict, media: Media = None) -> Optional[dict]:
        fields = self._validate(payload)
        request = self._encode(fields, self._prepare_media(media))

        with self.pending(self.CREATE_KEY):
            body = self.api.post(self.spec.collection_path(), **request)
            if self.closed:
                return None
            created = body.get("data")
            if not isinstance(created, dict):
                # Nothing to reconcile from; reload the authoritative list.
                self.fetch_all()
                created = None
            else:
                self.reconcile(self.id_of(created), created)

        self.record("create", created and self.id_of(created))
        return created

    def update(self, resource_id, payload: dict, media: Media = None) -> Optional[dict]:
        fields = self._validate(payload)
        request = self._encode(fields, self._prepare_media(media))

        with self.pending(resource_id):
            body = self.api.put(self.spec.item_path(resource_id), **request)
            if self.closed:
                return None
            updated = body.get("data")
            if not isinstance(updated, dict):
                self.fetch_all()
                updated = self.get(resource_id)
            else:
                self.reconcile(resource_id, updated)

        self.record("update", resource_id)
        return updated

    def remove(self, resource_id) -> bool:
        with self.pending(resource_id):
            self.api.delete(self.spec.item_path(resource_id))
            if self.closed:
                return False
            self._items = self._sorted(
                item for item in self._items if not same_id(self.id_of(item), resource_id)
            )

        self.record("delete", resource_id)
        return True

    def set_fields(self, resource_id, fields: dict, suffix: str = None) -> Optional[dict]:
        """
        PUT a small JSON change (availability, active flag, message status).

        Confirmed-only: the entry changes after the server accepts it, using
        the returned representation when there is one.
        """
        if self.get(resource_id) is None:
            raise ValidationError(f"{self.spec.label or 'Item'} not found")

        with self.pending(resource_id):
            body = self.api.put(self.spec.item_path(resource_id, suffix), json=fields)
            if self.closed:
                return None
            data = body.get("data")
            if isinstance(data, dict) and same_id(self.id_of(data), resource_id):
                updated = data
            else:
                current = self.get(resource_id) or {self.spec.id_field: resource_id}
                updated = {**current, **fields}
            self.reconcile(resource_id, updated)

        self.record(f"set {', '.join(sorted(fields))}", resource_id)
        return updated

    # ===================== HELPERS =====================

    def _sorted(self, items: Iterable[dict]) -> List[dict]:
        return sorted(items, key=self.spec.sort_key, reverse=self.spec.descending)

    def _dedupe(self, items: Iterable[dict]) -> List[dict]:
        seen = set()
        unique = []
        for item in items:
            if self.id_of(item) is None:
                # Rows without an id are kept as-is, never merged
                logger.warning("%s entry without %s from server", self.spec.name, self.spec.id_field)
                unique.append(item)
                continue
            key = str(self.id_of(item))
            if key in seen:
                logger.warning("Duplicate %s id %s from server ignored", self.spec.name, key)
                continue
            seen.add(key)
            unique.append(item)
        return unique

    def reconcile(self, resource_id, item: dict):
        """Swap in ``item`` for ``resource_id`` (or add it), then re-sort."""
        new_id = self.id_of(item)
        result = []
        placed = False
        for existing in self._items:
            existing_id = self.id_of(existing)
            if same_id(existing_id, resource_id) or same_id(existing_id, new_id):
                if not placed:
                    result.append(item)
                    placed = True
                continue
            result.append(existing)
        if not placed:
            result.append(item)
        self._items = self._sorted(result)

    def _validate(self, payload: dict) -> dict:
        fields = {
            key: value.strip() if isinstance(value, str) else value
            for key, value in (payload or {}).items()
        }
        missing = [
            name for name in self.spec.required_fields
            if fields.get(name) is None or fields.get(name) == ""
        ]
        if missing:
            raise ValidationError(f"Please fill in all required fields: {', '.join(missing)}")
        return fields

    def _prepare_media(self, media: Media) -> Optional[MediaAsset]:
        if media is None or isinstance(media, MediaAsset):
            return media
        return prepare_upload(media)

    def _encode(self, fields: dict, media: Optional[MediaAsset]) -> dict:
        """Build the requests kwargs for this resource's image transport."""
        mode = self.spec.image_mode
        if mode == MULTIPART:
            files = {
                key: (None, form_value(value))
                for key, value in fields.items()
                if value is not None
            }
            if media is not None:
                files[self.spec.image_field] = media.as_file_tuple()
            return {"files": files}

        body = dict(fields)
        if media is not None:
            if mode != BASE64:
                raise ValidationError(f"{self.spec.label or self.spec.name} does not take an image")
            body[self.spec.image_field] = media.preview_data_uri
        return {"json": body}

    def record(self, action: str, resource_id):
        if self.audit is not None:
            self.audit(self.api.session.email, self.spec.name, action, resource_id)
