"""CRUD clients that keep working while the backend is unreachable.

A successful backend call is returned untouched. When a call fails in a way
`should_fall_back` accepts, the operation is served from the resource's
LocalRecordStore instead: creates are synthesized and stored locally, deletes
remove the local copy, and lists are paginated from local records alone.
Records with a local id are read, updated and removed locally without a
backend call. On a successful list, locally-created records are put in front
of the backend's. Local records are never pushed to the backend.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError

from realty.app import constants
from realty.app.env_loader import Settings
from realty.errors import BackendError, NotFound, RealtyError, StoreError
from realty.models.base import RecordModel, utc_now_iso
from realty.models.blog import Blog
from realty.models.contact import Contact
from realty.models.property import Property
from realty.models.responses import Page, Pagination, ResourceEnvelope, record_id
from realty.models.review import Review
from realty.models.visit_request import VisitRequest
from realty.store.records import LocalRecordStore, is_local_id
from .backend import BackendClient
from .fallback import RetryPolicy, should_fall_back

logger = logging.getLogger(__name__)

# Fields the client assigns itself when synthesizing a record.
_ASSIGNED_FIELDS = ("_id", "id", "createdAt", "updatedAt")


@dataclass(frozen=True)
class ResourceSpec:
    """Endpoints, storage key, and record shape of one resource type."""

    name: str
    label: str
    record_key: str
    list_key: str
    list_path: str
    create_path: str
    item_path: str
    storage_key: str
    model: type[RecordModel]
    defaults: Mapping[str, Any] = field(default_factory=dict)

    def path_for(self, id: str) -> str:
        return self.item_path.format(id=id)


PROPERTIES = ResourceSpec(
    name="properties",
    label="Property",
    record_key="property",
    list_key="properties",
    list_path="/properties",
    create_path="/properties",
    item_path="/properties/{id}",
    storage_key=constants.PROPERTIES_KEY,
    model=Property,
)

REVIEWS = ResourceSpec(
    name="reviews",
    label="Review",
    record_key="review",
    list_key="reviews",
    list_path="/reviews",
    create_path="/reviews",
    item_path="/reviews/{id}",
    storage_key=constants.REVIEWS_KEY,
    model=Review,
)

# Admin endpoints see pending reviews too; reviews created here are approved.
ADMIN_REVIEWS = ResourceSpec(
    name="admin_reviews",
    label="Review",
    record_key="review",
    list_key="reviews",
    list_path="/reviews/admin/all",
    create_path="/reviews/admin/create",
    item_path="/reviews/admin/{id}",
    storage_key=constants.REVIEWS_KEY,
    model=Review,
    defaults={"isApproved": True},
)

BLOGS = ResourceSpec(
    name="blogs",
    label="Blog",
    record_key="blog",
    list_key="blogs",
    list_path="/blogs",
    create_path="/blogs",
    item_path="/blogs/{id}",
    storage_key=constants.BLOGS_KEY,
    model=Blog,
)

CONTACTS = ResourceSpec(
    name="contacts",
    label="Message",
    record_key="contact",
    list_key="contacts",
    list_path="/contact",
    create_path="/contact",
    item_path="/contact/{id}",
    storage_key=constants.CONTACTS_KEY,
    model=Contact,
)

VISIT_REQUESTS = ResourceSpec(
    name="visit_requests",
    label="Visit request",
    record_key="visitRequest",
    list_key="visitRequests",
    list_path="/auth/visit-requests",
    create_path="/auth/visit-requests",
    item_path="/auth/visit-requests/{id}",
    storage_key=constants.VISIT_REQUESTS_KEY,
    model=VisitRequest,
)


def synthesize_record(
    spec: ResourceSpec, payload: Mapping[str, Any], id: str
) -> dict[str, Any]:
    """Build a complete record from a partial payload.

    Every field the UI renders gets its documented default when the payload
    leaves it out. Raises pydantic's ValidationError for values that cannot be
    coerced (e.g. a non-numeric price).
    """
    data = {k: v for k, v in payload.items() if k not in _ASSIGNED_FIELDS}
    data = {**spec.defaults, **data, "_id": id}
    return spec.model.model_validate(data).to_record()


def merge_local_records(
    server_page: Page, local_records: list[dict[str, Any]], limit: int
) -> Page:
    """Put local records in front of a backend page.

    Records whose id already appears in the backend page are skipped, so
    merging is idempotent. Totals grow by the number of records added.
    """
    server_ids = server_page.ids
    extra = [r for r in local_records if record_id(r) not in server_ids]
    if not extra:
        return server_page

    total = server_page.pagination.total + len(extra)
    current = server_page.pagination
    recomputed = Pagination.for_total(total, current.current_page, limit)
    pagination = current.model_copy(
        update={
            "total": total,
            "total_pages": max(current.total_pages, recomputed.total_pages),
        }
    )
    logger.info(
        f"Combining {len(server_page.items)} backend {server_page.list_key} "
        f"with {len(extra)} local records"
    )
    return Page(
        list_key=server_page.list_key,
        items=[*extra, *server_page.items],
        pagination=pagination,
        source="merged",
    )


def _envelope(payload: dict[str, Any]) -> ResourceEnvelope:
    try:
        return ResourceEnvelope.model_validate(payload)
    except PydanticValidationError as e:
        raise BackendError(f"Backend returned a malformed envelope: {e}") from e


def _page_from(payload: dict[str, Any], list_key: str) -> Page:
    data = payload.get("data") or {}
    if not isinstance(data, dict) or not isinstance(data.get(list_key) or [], list):
        raise BackendError(f"Backend returned a malformed {list_key} list")
    try:
        return Page.from_envelope(payload, list_key)
    except PydanticValidationError as e:
        raise BackendError(f"Backend returned a malformed {list_key} list: {e}") from e


def _paging(params: Mapping[str, Any]) -> tuple[int, int]:
    def _int(value: Any, default: int) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    page = _int(params.get("page"), 1)
    limit = _int(params.get("limit"), constants.DEFAULT_PAGE_SIZE)
    return max(page, 1), max(limit, 1)


@dataclass
class ResourceClient:
    spec: ResourceSpec
    backend: BackendClient
    local: LocalRecordStore
    settings: Settings = field(default_factory=Settings)
    retry_policy: RetryPolicy = field(default_factory=RetryPolicy)

    async def _call(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        return await self.retry_policy.run(
            self.backend.request, method, path, **kwargs
        )

    def _falls_back(self, error: RealtyError, *, write: bool) -> bool:
        return should_fall_back(
            error,
            write=write,
            fallback_on_validation_error=self.settings.fallback_on_validation_error,
        )

    def _find_local(
        self, id: str, cause: Optional[RealtyError] = None
    ) -> dict[str, Any]:
        record = self.local.find(id)
        if record is None:
            logger.info(f"{self.spec.label} {id} not found locally")
            raise NotFound(f"{self.spec.label} not found", 404) from cause
        return record

    def _update_local(
        self,
        id: str,
        changes: Mapping[str, Any],
        cause: Optional[RealtyError] = None,
    ) -> dict[str, Any]:
        """Apply changes to a local record.

        When the local path stands in for a failed backend call, a storage
        failure re-raises that backend error instead.
        """
        try:
            return self.local.update(id, {**changes, "updatedAt": utc_now_iso()})
        except NotFound:
            raise NotFound(f"{self.spec.label} not found", 404) from cause
        except StoreError as fallback_error:
            logger.error(f"Local {self.spec.name} update failed: {fallback_error}")
            if cause is None:
                raise
            raise cause from fallback_error

    def _remove_local(self, id: str, cause: Optional[RealtyError] = None) -> None:
        try:
            removed = self.local.remove(id)
        except StoreError as fallback_error:
            logger.error(f"Local {self.spec.name} delete failed: {fallback_error}")
            if cause is None:
                raise
            raise cause from fallback_error
        if not removed:
            logger.info(f"No local {self.spec.name} record {id} to delete")

    def _local_page(self, params: Mapping[str, Any]) -> Page:
        page, limit = _paging(params)
        items, pagination = self.local.page(page, limit)
        logger.info(
            f"Serving {self.spec.name} page {page}/{pagination.total_pages} "
            f"from {pagination.total} local records"
        )
        return Page(
            list_key=self.spec.list_key,
            items=items,
            pagination=pagination,
            source="local",
        )

    async def list(self, params: Optional[Mapping[str, Any]] = None) -> Page:
        """Get one page of records, merged with locally-created ones."""
        params = dict(params or {})
        try:
            payload = await self._call("GET", self.spec.list_path, params=params)
        except RealtyError as e:
            if not self._falls_back(e, write=False):
                raise
            logger.warning(
                f"Backend not available for {self.spec.name} list ({e}), "
                f"using local records"
            )
            return self._local_page(params)

        server_page = _page_from(payload, self.spec.list_key)
        _, limit = _paging(params)
        return merge_local_records(server_page, self.local.all(), limit)

    async def get(self, id: str) -> dict[str, Any]:
        """Get one record from the backend, or from the local store.

        Raises:
            NotFound: If neither holds the record.
        """
        if is_local_id(id):
            return self._find_local(id)
        try:
            payload = await self._call("GET", self.spec.path_for(id))
        except RealtyError as e:
            if not self._falls_back(e, write=False):
                raise
            return self._find_local(id, cause=e)

        record = _envelope(payload).record(self.spec.record_key)
        if record is None:
            raise NotFound(f"{self.spec.label} not found", 404)
        if not isinstance(record, dict):
            raise BackendError(f"Backend returned a malformed {self.spec.record_key}")
        return record

    async def create(self, payload: Mapping[str, Any]) -> ResourceEnvelope:
        """Create a record on the backend, or locally if it is unreachable.

        Raises:
            RealtyError: The original backend error, when it is not a fallback
                trigger or when the local fallback itself fails.
        """
        try:
            response = await self._call(
                "POST", self.spec.create_path, json=dict(payload)
            )
        except RealtyError as e:
            if not self._falls_back(e, write=True):
                raise
            logger.warning(
                f"Backend not available for {self.spec.name} create ({e}), "
                f"creating locally"
            )
            try:
                record = synthesize_record(self.spec, payload, self.local.new_id())
                self.local.prepend(record)
            except (PydanticValidationError, StoreError) as fallback_error:
                logger.error(
                    f"Local {self.spec.name} create failed: "
                    f"exception_type={type(fallback_error).__name__}, "
                    f"error={fallback_error}"
                )
                raise e from fallback_error
        else:
            return _envelope(response)

        return ResourceEnvelope(
            success=True,
            message=f"{self.spec.label} created successfully (offline)",
            data={self.spec.record_key: record},
            offline=True,
        )

    async def update(
        self,
        id: str,
        changes: Mapping[str, Any],
        *,
        action: str | None = None,
        method: str = "PUT",
    ) -> ResourceEnvelope:
        """Update a record on the backend, or the local copy if unreachable.

        Args:
            id: Record id.
            changes: Fields to change.
            action: Optional sub-resource, e.g. "status" for
                `PATCH /reviews/admin/{id}/status`.
            method: HTTP method of the backend call.
        """
        if is_local_id(id):
            # The backend has never seen a local record.
            record = self._update_local(id, changes)
        else:
            path = self.spec.path_for(id)
            if action:
                path = f"{path}/{action}"
            try:
                response = await self._call(method, path, json=dict(changes))
            except RealtyError as e:
                if not self._falls_back(e, write=True):
                    raise
                logger.warning(
                    f"Backend not available for {self.spec.name} update ({e}), "
                    f"updating local record {id}"
                )
                record = self._update_local(id, changes, cause=e)
            else:
                return _envelope(response)

        return ResourceEnvelope(
            success=True,
            message=f"{self.spec.label} updated successfully (offline)",
            data={self.spec.record_key: record},
            offline=True,
        )

    async def remove(self, id: str) -> ResourceEnvelope:
        """Delete a record from the backend, or from the local store.

        Reports success whenever the record is gone from the caller's view.
        """
        if is_local_id(id):
            self._remove_local(id)
        else:
            try:
                response = await self._call("DELETE", self.spec.path_for(id))
            except RealtyError as e:
                if not self._falls_back(e, write=True):
                    raise
                logger.warning(
                    f"Backend not available for {self.spec.name} delete ({e}), "
                    f"deleting local record {id}"
                )
                self._remove_local(id, cause=e)
            else:
                return _envelope(response)

        return ResourceEnvelope(
            success=True,
            message=f"{self.spec.label} deleted successfully (offline)",
            offline=True,
        )


@dataclass
class PropertyClient(ResourceClient):
    """Property client; construct with spec=PROPERTIES."""

    async def featured(self, limit: int = constants.DEFAULT_FEATURED_LIMIT) -> Page:
        """Get featured properties, local featured ones first."""
        local_featured = [r for r in self.local.all() if r.get("isFeatured") is True]
        try:
            payload = await self._call(
                "GET", f"{self.spec.list_path}/featured", params={"limit": limit}
            )
        except RealtyError as e:
            if not self._falls_back(e, write=False):
                raise
            logger.warning(f"Backend not available for featured properties ({e})")
            # With nothing featured locally, show the newest local listings.
            items = (local_featured or self.local.all())[:limit]
            return Page(
                list_key=self.spec.list_key,
                items=items,
                pagination=Pagination.for_total(len(items), 1, max(limit, 1)),
                source="local",
            )

        server_page = _page_from(payload, self.spec.list_key)
        server_ids = server_page.ids
        extra = [r for r in local_featured if record_id(r) not in server_ids]
        if not extra:
            return server_page
        items = [*extra, *server_page.items][:limit]
        return Page(
            list_key=self.spec.list_key,
            items=items,
            pagination=Pagination.for_total(len(items), 1, max(limit, 1)),
            source="merged",
        )
