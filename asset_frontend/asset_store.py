"""
asset_frontend/asset_store.py

The asset store: the only code that reads or writes asset and category rows.

Guarantees:
- Every public method returns a Result; transport, auth and validation errors
  never escape as exceptions
- The cached asset list mirrors the outcome of the last operation performed
  through this store and is left untouched when an operation fails
- The cache is only written here; pages get read-only tuples
- Payloads are sanitized (empty dates -> null) and validated before sending

One store lives in st.session_state per browser session and is passed to the
page renderers; there is no module-level cache.
"""

from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional, Tuple, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from asset_frontend.api_client import ApiAuthError, ApiError, SupabaseClient
from asset_frontend.asset_queries import ASSET_SELECT, build_asset_query, sanitize_date_fields
from asset_frontend.auth import SessionAuth
from asset_frontend.config import ENABLE_VERBOSE_LOGGING
from asset_frontend.results import ErrorKind, Result
from domains.assets.models.asset import (
    Asset,
    AssetAssignment,
    AssetCategory,
    AssetDetail,
    AssetDocument,
    AssetMaintenance,
)
from domains.assets.models.payloads import AssetCreate, AssetFilters, AssetUpdate

ASSETS_TABLE = "assets"
CATEGORIES_TABLE = "asset_categories"
RELATED_TABLES = (
    ("assignments", "asset_assignments", AssetAssignment),
    ("maintenance", "asset_maintenance", AssetMaintenance),
    ("documents", "asset_documents", AssetDocument),
)

M = TypeVar("M", bound=BaseModel)


def _log(message: str) -> None:
    if ENABLE_VERBOSE_LOGGING:
        print(f"[ASSETS] {message}")


def validation_message(exc: ValidationError) -> str:
    """Flatten pydantic errors into one readable line for inline display."""
    parts = []
    for err in exc.errors():
        field = ".".join(str(p) for p in err.get("loc", ()))
        parts.append(f"{field}: {err.get('msg')}" if field else str(err.get("msg")))
    return "; ".join(parts) or "Invalid input"


def _parse_rows(model: Type[M], rows: Iterable[Mapping[str, Any]]) -> List[M]:
    return [model.model_validate(row) for row in rows]


class AssetStore:
    """
    Access layer for assets and categories.

    Args:
        client: Configured SupabaseClient
        auth: Source of the current session (access token and user id)
    """

    def __init__(self, client: SupabaseClient, auth: SessionAuth):
        self._client = client
        self._auth = auth
        self._assets: List[Asset] = []
        self._categories: List[AssetCategory] = []
        self._last_filters: Optional[AssetFilters] = None
        self.last_error: Optional[str] = None

    # ------------------------------------------------------------------
    # Read-only views for pages
    # ------------------------------------------------------------------

    @property
    def assets(self) -> Tuple[Asset, ...]:
        return tuple(self._assets)

    @property
    def categories(self) -> Tuple[AssetCategory, ...]:
        return tuple(self._categories)

    @property
    def last_filters(self) -> Optional[AssetFilters]:
        return self._last_filters

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _require_auth(self) -> Optional[Result]:
        if not self._auth.is_authenticated():
            return Result.failure(ErrorKind.not_authenticated, "Not authenticated. Please sign in.")
        return None

    def _failure(self, exc: Exception, operation: str, default_message: str) -> Result:
        if isinstance(exc, ApiAuthError):
            _log(f"{operation}: not authenticated")
            return Result.failure(ErrorKind.not_authenticated, exc.message)
        if isinstance(exc, ApiError):
            _log(f"{operation}: remote failure ({exc.status_code}): {exc.message}")
            return Result.failure(ErrorKind.remote_failure, exc.message or default_message)
        if isinstance(exc, ValidationError):
            # Rows coming back from the store that do not fit the model
            _log(f"{operation}: unexpected record shape: {validation_message(exc)}")
            return Result.failure(ErrorKind.remote_failure, default_message)
        _log(f"{operation}: unexpected error {type(exc).__name__}: {exc}")
        return Result.failure(ErrorKind.remote_failure, default_message)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def list(self, filters: Union[AssetFilters, Mapping[str, Any], None] = None) -> Result[List[Asset]]:
        """
        Fetch assets matching every supplied filter, newest first, and replace
        the cache with them. On failure the previous list stays cached.
        """
        denied = self._require_auth()
        if denied:
            self.last_error = denied.error.message
            return denied

        if filters is not None and not isinstance(filters, AssetFilters):
            try:
                filters = AssetFilters.model_validate(dict(filters))
            except ValidationError as e:
                self.last_error = validation_message(e)
                return Result.failure(ErrorKind.validation_failure, self.last_error)

        try:
            rows = self._client.select(ASSETS_TABLE, build_asset_query(filters))
            assets = _parse_rows(Asset, rows)
        except Exception as e:
            result = self._failure(e, "list", "Failed to fetch assets")
            self.last_error = result.error.message
            return result

        self._assets = assets
        self._last_filters = filters
        self.last_error = None
        _log(f"List: filters={filters.model_dump(exclude_none=True) if filters else {}}, results={len(assets)}")
        return Result.success(list(assets))

    def refetch(self) -> Result[List[Asset]]:
        """Re-run the last list query."""
        return self.list(self._last_filters)

    def list_categories(self) -> Result[List[AssetCategory]]:
        """All categories by name. A failure here never blocks asset listing."""
        denied = self._require_auth()
        if denied:
            return denied

        try:
            rows = self._client.select(CATEGORIES_TABLE, [("select", "*"), ("order", "name.asc")])
            categories = _parse_rows(AssetCategory, rows)
        except Exception as e:
            return self._failure(e, "list_categories", "Failed to fetch categories")

        self._categories = categories
        return Result.success(list(categories))

    def create(self, form: Union[AssetCreate, Mapping[str, Any]]) -> Result[Asset]:
        """
        Insert a new asset stamped with the current user and prepend it to the cache.
        """
        denied = self._require_auth()
        if denied:
            return denied
        user_id = self._auth.user_id()
        if not user_id:
            return Result.failure(ErrorKind.not_authenticated, "User not authenticated")

        try:
            payload = form if isinstance(form, AssetCreate) else AssetCreate.model_validate(sanitize_date_fields(form))
        except ValidationError as e:
            return Result.failure(ErrorKind.validation_failure, validation_message(e))

        row = {**payload.to_payload(), "created_by": user_id}
        try:
            rows = self._client.insert(ASSETS_TABLE, row, [("select", ASSET_SELECT)])
            if not rows:
                return Result.failure(ErrorKind.remote_failure, "Failed to create asset")
            asset = Asset.model_validate(rows[0])
        except ValidationError as e:
            # The write landed; resync the cache from the store
            self.refetch()
            return self._failure(e, "create", "Failed to create asset")
        except Exception as e:
            return self._failure(e, "create", "Failed to create asset")

        self._assets = [asset] + self._assets
        _log(f"Created asset_id={asset.id}")
        return Result.success(asset)

    def update(self, asset_id: str, form: Union[AssetUpdate, Mapping[str, Any]]) -> Result[Asset]:
        """
        Send only the supplied fields. The cached entry is replaced in place.
        """
        denied = self._require_auth()
        if denied:
            return denied

        try:
            payload = form if isinstance(form, AssetUpdate) else AssetUpdate.model_validate(sanitize_date_fields(form))
        except ValidationError as e:
            return Result.failure(ErrorKind.validation_failure, validation_message(e))

        patch = payload.to_payload()
        if not patch:
            return Result.failure(ErrorKind.validation_failure, "No fields to update")

        try:
            rows = self._client.update(
                ASSETS_TABLE, patch, [("id", f"eq.{asset_id}"), ("select", ASSET_SELECT)]
            )
            if not rows:
                return Result.failure(ErrorKind.not_found, "Asset not found")
            asset = Asset.model_validate(rows[0])
        except ValidationError as e:
            # The write landed; resync the cache from the store
            self.refetch()
            return self._failure(e, "update", "Failed to update asset")
        except Exception as e:
            return self._failure(e, "update", "Failed to update asset")

        self._assets = [asset if a.id == asset_id else a for a in self._assets]
        _log(f"Updated asset_id={asset_id}, fields={sorted(patch)}")
        return Result.success(asset)

    def delete(self, asset_id: str) -> Result[None]:
        """
        Hard delete. Child rows are whatever the database's foreign keys do.
        """
        denied = self._require_auth()
        if denied:
            return denied

        try:
            rows = self._client.delete(ASSETS_TABLE, [("id", f"eq.{asset_id}")])
        except Exception as e:
            return self._failure(e, "delete", "Failed to delete asset")
        if not rows:
            return Result.failure(ErrorKind.not_found, "Asset not found")

        self._assets = [a for a in self._assets if a.id != asset_id]
        _log(f"Deleted asset_id={asset_id}")
        return Result.success(None)

    def get(self, asset_id: str) -> Result[AssetDetail]:
        """
        One asset with its category and related records.

        Only the asset fetch can fail the call; each related table that fails
        to load comes back as an empty list.
        """
        denied = self._require_auth()
        if denied:
            return denied

        try:
            rows = self._client.select(
                ASSETS_TABLE, [("select", ASSET_SELECT), ("id", f"eq.{asset_id}")]
            )
            if not rows:
                return Result.failure(ErrorKind.not_found, "Asset not found")
            detail = AssetDetail.model_validate(rows[0])
        except Exception as e:
            return self._failure(e, "get", "Failed to fetch asset")

        related = {name: self._fetch_related(table, model, asset_id) for name, table, model in RELATED_TABLES}
        return Result.success(detail.model_copy(update=related))

    def _fetch_related(self, table: str, model: Type[M], asset_id: str) -> List[M]:
        try:
            rows = self._client.select(
                table, [("select", "*"), ("asset_id", f"eq.{asset_id}"), ("order", "created_at.desc")]
            )
            return _parse_rows(model, rows)
        except Exception as e:
            _log(f"get: {table} unavailable for asset_id={asset_id} ({type(e).__name__})")
            return []
