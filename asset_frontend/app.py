# asset_frontend/app.py
# Asset Inventory: dashboard, assets list/detail/edit, CSV export
#
# Run from repo root: streamlit run asset_frontend/app.py

from __future__ import annotations

import sys
from datetime import date
from pathlib import Path
from typing import Any, Dict, Optional

import streamlit as st

# Make the repo root importable when launched via `streamlit run`
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from asset_frontend.api_client import ApiError, SupabaseClient
from asset_frontend.asset_store import AssetStore
from asset_frontend.asset_views import (
    SORT_FIELDS,
    assets_dataframe,
    next_sort,
    sort_assets,
    summarize_assets,
    warranty_state,
)
from asset_frontend.auth import (
    SessionAuth,
    get_current_user,
    init_auth_state,
    is_authenticated,
    refresh_session,
    require_auth,
    sign_in,
    sign_out,
)
from asset_frontend.config import ENABLE_DEBUG_UI, ENV, IS_DEV
from asset_frontend.dev_observability import (
    clear_debug_history,
    export_snapshot_json,
    get_recent_events,
    track_event,
    track_result,
)
from asset_frontend.exports import build_assets_csv, export_filename
from asset_frontend.formatters import format_currency, format_date, format_datetime, format_number
from asset_frontend.notifications import NotificationQueue, ToastKind
from asset_frontend.results import Result
from domains.assets.models.asset import Asset, AssetStatus, ConditionStatus, Location
from domains.assets.models.payloads import AssetFilters

st.set_page_config(page_title="Asset Inventory", page_icon="📦", layout="wide")

PAGES = ["Dashboard", "Assets"]
SORT_LABELS = {
    "name": "Name",
    "category": "Category",
    "location": "Location",
    "purchase_price": "Price",
    "condition_status": "Condition",
    "asset_status": "Status",
    "purchase_date": "Purchased",
}
DEBUG_KEYS = ["nav_page", "is_authenticated", "access_token", "asset_sort", "asset_view_id", "asset_edit_id"]


# --------------------------------------------------------------------
# Session state
# --------------------------------------------------------------------

def init_state() -> None:
    ss = st.session_state

    # Auth keys first so every page sees them on every rerun
    init_auth_state()

    ss.setdefault("nav_page", None)

    if "_supabase_client" not in ss:
        ss["_supabase_client"] = SupabaseClient(
            token_provider=lambda: st.session_state.get("access_token"),
            on_unauthorized=lambda: refresh_session(st.session_state["_supabase_client"]),
        )
    if "_asset_store" not in ss:
        ss["_asset_store"] = AssetStore(ss["_supabase_client"], SessionAuth())
    ss.setdefault("_toasts", NotificationQueue())
    ss.setdefault("_assets_loaded", False)

    # Assets page UI state
    ss.setdefault("asset_sort", ("name", "asc"))
    ss.setdefault("asset_form_open", False)
    ss.setdefault("asset_edit_id", None)
    ss.setdefault("asset_view_id", None)
    ss.setdefault("asset_delete_id", None)


def get_client() -> SupabaseClient:
    return st.session_state["_supabase_client"]


def get_store() -> AssetStore:
    return st.session_state["_asset_store"]


def get_toasts() -> NotificationQueue:
    return st.session_state["_toasts"]


def go_to(page: str) -> None:
    """Single place that changes page; reruns immediately."""
    st.session_state["nav_page"] = page
    st.rerun()


def ensure_assets_loaded() -> None:
    """First load of assets and categories for this session."""
    ss = st.session_state
    if ss["_assets_loaded"]:
        return
    store = get_store()
    with st.spinner("Loading assets..."):
        result = store.list()
        categories = store.list_categories()
    if IS_DEV:
        track_result(ss, "list", result)
        track_result(ss, "list_categories", categories)
    if not categories.ok:
        print(f"[ASSETS] Failed to fetch categories: {categories.error.message}")
    ss["_assets_loaded"] = result.ok


def report(result: Result, success_title: str, failure_title: str) -> None:
    """Toast the outcome of a mutation."""
    toasts = get_toasts()
    if result.ok:
        toasts.success(success_title)
    else:
        toasts.error(failure_title, result.error.message)


# --------------------------------------------------------------------
# Toasts
# --------------------------------------------------------------------

_TOAST_RENDERERS = {
    ToastKind.success: st.success,
    ToastKind.error: st.error,
    ToastKind.warning: st.warning,
    ToastKind.info: st.info,
}


def render_toasts() -> None:
    toasts = get_toasts()
    for toast in toasts.active():
        col_msg, col_close = st.columns([12, 1])
        with col_msg:
            text = f"**{toast.title}**"
            if toast.message:
                text += f": {toast.message}"
            _TOAST_RENDERERS[toast.kind](text)
        with col_close:
            if st.button("✕", key=f"toast_close_{toast.id}"):
                toasts.remove(toast.id)
                st.rerun()


# --------------------------------------------------------------------
# Sidebar
# --------------------------------------------------------------------

def render_sidebar() -> None:
    ss = st.session_state
    with st.sidebar:
        st.markdown("## 📦 Asset Inventory")
        if not is_authenticated():
            st.caption("Sign in to manage assets.")
            return

        user = get_current_user() or {}
        st.caption(f"Signed in as {user.get('email', 'unknown')}")

        for page in PAGES:
            if st.button(page, key=f"nav_{page}", use_container_width=True,
                         type="primary" if ss.get("nav_page") == page else "secondary"):
                go_to(page)

        st.divider()
        if st.button("Sign out", key="nav_sign_out", use_container_width=True):
            sign_out(get_client())
            ss["_assets_loaded"] = False
            ss["_asset_store"] = AssetStore(get_client(), SessionAuth())
            get_toasts().clear()
            if IS_DEV:
                track_event(ss, "sign_out")
            go_to("Login")


# --------------------------------------------------------------------
# Auth pages
# --------------------------------------------------------------------

def render_login() -> None:
    ss = st.session_state
    client = get_client()

    st.header("Asset Inventory")
    tab_login, tab_signup, tab_forgot = st.tabs(["Sign in", "Create account", "Forgot password"])

    with tab_login:
        with st.form("login_form"):
            email = st.text_input("Email", key="login_email")
            password = st.text_input("Password", type="password", key="login_password")
            submitted = st.form_submit_button("Sign in")

        if submitted:
            if not email or not password:
                st.error("Please enter email and password.")
                return
            error = sign_in(client, email, password)
            if error:
                st.error(f"Sign-in failed: {error}")
                return
            if IS_DEV:
                track_event(ss, "login_success", {"user": email})
            get_toasts().success("Welcome back!")
            go_to("Dashboard")

    with tab_signup:
        with st.form("signup_form"):
            full_name = st.text_input("Full name", key="signup_name")
            email = st.text_input("Email", key="signup_email")
            password = st.text_input("Password", type="password", key="signup_password")
            confirm = st.text_input("Confirm password", type="password", key="signup_confirm")
            submitted = st.form_submit_button("Create account")

        if submitted:
            if not email or not password:
                st.error("Please enter email and password.")
            elif password != confirm:
                st.error("Passwords do not match.")
            elif len(password) < 6:
                st.error("Password must be at least 6 characters.")
            else:
                try:
                    client.sign_up(email.strip(), password, full_name.strip() or None)
                    st.success("Account created. Check your email to confirm, then sign in.")
                except ApiError as e:
                    st.error(f"Sign-up failed: {e.message}")

    with tab_forgot:
        with st.form("forgot_form"):
            email = st.text_input("Email", key="forgot_email")
            submitted = st.form_submit_button("Send reset link")

        if submitted:
            if not email:
                st.error("Please enter your email.")
            else:
                try:
                    client.recover_password(email.strip())
                    st.success("If that address has an account, a reset link is on its way.")
                except ApiError as e:
                    st.error(f"Could not send reset link: {e.message}")


# --------------------------------------------------------------------
# Dashboard
# --------------------------------------------------------------------

def render_dashboard() -> None:
    if not require_auth():
        return
    ensure_assets_loaded()
    store = get_store()

    st.markdown("## Dashboard")
    if store.last_error:
        st.error(f"Failed to load assets: {store.last_error}")

    summary = summarize_assets(store.assets)
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Total assets", format_number(summary["total"]))
    col2.metric("Active", format_number(summary["by_status"][AssetStatus.active.value]))
    col3.metric("In repair", format_number(summary["by_status"][AssetStatus.in_repair.value]))
    col4.metric("Total value", format_currency(summary["total_value"]))

    col_cond, col_recent = st.columns(2)
    with col_cond:
        st.markdown("### By condition")
        for condition in ConditionStatus:
            st.write(f"{condition.label}: {format_number(summary['by_condition'][condition.value])}")

        expiring = summary["warranties_expiring"]
        if expiring:
            st.markdown(f"### ⚠️ Warranties expiring soon ({len(expiring)})")
            for asset in expiring:
                st.write(f"{asset.name}: {format_date(asset.warranty_end_date)}")

    with col_recent:
        st.markdown("### Recently added")
        if not summary["recent"]:
            st.info("No assets yet.")
        for asset in summary["recent"]:
            st.write(f"**{asset.name}** · {asset.category_name} · {format_date(asset.created_at)}")


# --------------------------------------------------------------------
# Assets page
# --------------------------------------------------------------------

def _enum_select(label: str, enum_cls, key: str, current=None, allow_blank: bool = True):
    options = ([""] if allow_blank else []) + [e.value for e in enum_cls]
    index = options.index(current.value) if current is not None else 0
    return st.selectbox(
        label,
        options,
        index=index,
        format_func=lambda v: "All" if v == "" else enum_cls(v).label,
        key=key,
    )


def render_filters(store: AssetStore) -> AssetFilters:
    ss = st.session_state

    if ss.pop("_clear_asset_filters", False):
        for key in ("filter_search", "filter_category", "filter_status", "filter_location",
                    "filter_condition", "filter_date_from", "filter_date_to"):
            ss.pop(key, None)

    categories = {c.id: c.name for c in store.categories}

    st.markdown("### Filters")
    col_search, col_cat, col_status, col_loc = st.columns([3, 2, 2, 2])
    search = col_search.text_input("Search", placeholder="Name, description or serial number", key="filter_search")
    with col_cat:
        category = st.selectbox(
            "Category",
            [""] + list(categories),
            format_func=lambda v: "All" if v == "" else categories.get(v, v),
            key="filter_category",
        )
    with col_status:
        status = _enum_select("Status", AssetStatus, "filter_status")
    with col_loc:
        location = _enum_select("Location", Location, "filter_location")

    with st.expander("Advanced filters"):
        col_cond, col_from, col_to = st.columns(3)
        with col_cond:
            condition = _enum_select("Condition", ConditionStatus, "filter_condition")
        date_from = col_from.date_input("Purchased from", value=None, key="filter_date_from")
        date_to = col_to.date_input("Purchased to", value=None, key="filter_date_to")

    filters = AssetFilters(
        search=search,
        category=category,
        status=status,
        location=location,
        condition=condition,
        date_from=date_from,
        date_to=date_to,
    )

    if filters.has_active_filters and st.button("Clear all filters", key="filter_clear"):
        ss["_clear_asset_filters"] = True
        st.rerun()

    return filters


def render_asset_table(store: AssetStore) -> None:
    ss = st.session_state
    assets = store.assets

    st.markdown(f"### Assets ({len(assets)})")
    if store.last_error:
        st.error(f"Failed to load assets: {store.last_error}")
    if not assets:
        st.info("No assets found. Add one or adjust the filters.")
        return

    sort_field, sort_direction = ss["asset_sort"]
    sort_cols = st.columns(len(SORT_FIELDS))
    for col, field in zip(sort_cols, SORT_FIELDS):
        arrow = ""
        if field == sort_field:
            arrow = " ↑" if sort_direction == "asc" else " ↓"
        label = SORT_LABELS[field] + arrow
        if col.button(label, key=f"sort_{field}", use_container_width=True):
            ss["asset_sort"] = next_sort(sort_field, sort_direction, field)
            st.rerun()

    sorted_assets = sort_assets(assets, sort_field, sort_direction)
    st.dataframe(assets_dataframe(sorted_assets), use_container_width=True, hide_index=True)

    by_id = {a.id: a for a in sorted_assets}
    selected_id = st.selectbox(
        "Select asset to view or manage",
        options=[None] + list(by_id),
        format_func=lambda x: "-- Select --" if x is None else by_id[x].name,
        key="asset_selected_id",
    )
    if selected_id:
        col_view, col_edit, col_delete = st.columns(3)
        if col_view.button("View", key="asset_action_view", use_container_width=True):
            ss["asset_view_id"] = selected_id
            st.rerun()
        if col_edit.button("Edit", key="asset_action_edit", use_container_width=True):
            ss["asset_edit_id"] = selected_id
            ss["asset_form_open"] = True
            ss["asset_view_id"] = None
            st.rerun()
        if col_delete.button("Delete", key="asset_action_delete", use_container_width=True):
            ss["asset_delete_id"] = selected_id
            st.rerun()


def _date_text(value: Optional[date]) -> str:
    # Blank dates go through as "" and the store turns them into null
    return value.isoformat() if value else ""


def render_asset_form(store: AssetStore, asset: Optional[Asset]) -> None:
    ss = st.session_state
    categories = {c.id: c.name for c in store.categories}
    title = "Edit Asset" if asset else "Add New Asset"
    prefix = f"asset_form_{asset.id if asset else 'new'}"

    st.markdown(f"### {title}")
    with st.form(prefix):
        col1, col2 = st.columns(2)
        with col1:
            name = st.text_input("Name *", value=asset.name if asset else "")
            category_options = [""] + list(categories)
            current_category = asset.category_id if asset and asset.category_id in categories else ""
            category_id = st.selectbox(
                "Category",
                category_options,
                index=category_options.index(current_category),
                format_func=lambda v: "Uncategorized" if v == "" else categories[v],
            )
            serial_number = st.text_input("Serial number", value=(asset.serial_number or "") if asset else "")
            brand = st.text_input("Brand", value=(asset.brand or "") if asset else "")
            model = st.text_input("Model", value=(asset.model or "") if asset else "")
            location = _enum_select("Location *", Location, f"{prefix}_location",
                                    asset.location if asset else None, allow_blank=False)
            condition = _enum_select("Condition *", ConditionStatus, f"{prefix}_condition",
                                     asset.condition_status if asset else ConditionStatus.good, allow_blank=False)
            status = _enum_select("Status *", AssetStatus, f"{prefix}_status",
                                  asset.asset_status if asset else AssetStatus.active, allow_blank=False)
        with col2:
            purchase_date = st.date_input("Purchase date", value=asset.purchase_date if asset else None)
            purchase_price = st.number_input(
                "Purchase price (ZAR)", min_value=0.0, step=0.01, format="%.2f",
                value=asset.purchase_price if asset else None,
            )
            supplier = st.text_input("Supplier / vendor", value=(asset.supplier_vendor or "") if asset else "")
            warranty_start = st.date_input("Warranty start", value=asset.warranty_start_date if asset else None)
            warranty_end = st.date_input("Warranty end", value=asset.warranty_end_date if asset else None)
            warranty_details = st.text_area("Warranty details", value=(asset.warranty_details or "") if asset else "")
        description = st.text_area("Description", value=(asset.description or "") if asset else "")
        notes = st.text_area("Notes", value=(asset.notes or "") if asset else "")

        col_submit, col_cancel = st.columns(2)
        submitted = col_submit.form_submit_button("Save changes" if asset else "Create asset", type="primary")
        cancelled = col_cancel.form_submit_button("Cancel")

    if cancelled:
        close_asset_form()
        return
    if not submitted:
        return
    if not name.strip():
        st.error("Name is required.")
        return

    form: Dict[str, Any] = {
        "name": name,
        "description": description or None,
        "category_id": category_id,
        "serial_number": serial_number or None,
        "brand": brand or None,
        "model": model or None,
        "location": location,
        "condition_status": condition,
        "asset_status": status,
        "purchase_date": _date_text(purchase_date),
        "purchase_price": purchase_price,
        "supplier_vendor": supplier or None,
        "warranty_start_date": _date_text(warranty_start),
        "warranty_end_date": _date_text(warranty_end),
        "warranty_details": warranty_details or None,
        "notes": notes or None,
    }

    if asset:
        result = store.update(asset.id, form)
        operation, success_title, failure_title = "update", "Asset updated", "Failed to update asset"
    else:
        result = store.create(form)
        operation, success_title, failure_title = "create", "Asset created", "Failed to create asset"

    if IS_DEV:
        track_result(ss, operation, result)

    if not result.ok:
        # Keep the form open with the entered values
        st.error(result.error.message)
        return

    report(result, success_title, failure_title)
    close_asset_form()


def close_asset_form() -> None:
    ss = st.session_state
    ss["asset_form_open"] = False
    ss["asset_edit_id"] = None
    st.rerun()


def render_asset_detail(store: AssetStore, asset_id: str) -> None:
    ss = st.session_state
    with st.spinner("Loading asset details..."):
        result = store.get(asset_id)
    if IS_DEV:
        track_result(ss, "get", result, asset_id=asset_id)

    st.markdown("---")
    if not result.ok:
        st.error(result.error.message)
        if st.button("Close", key="asset_detail_close_err"):
            ss["asset_view_id"] = None
            st.rerun()
        return

    asset = result.data
    st.markdown(f"### {asset.name}")
    st.caption(f"{asset.category_name} · {asset.location.value}")

    state = warranty_state(asset.warranty_end_date)
    if state == "expired":
        st.error(f"Warranty expired on {format_date(asset.warranty_end_date)}")
    elif state == "expiring":
        st.warning(f"Warranty expires on {format_date(asset.warranty_end_date)}")

    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("Status", asset.asset_status.label)
        st.metric("Condition", asset.condition_status.label)
    with col2:
        st.metric("Purchase price", format_currency(asset.purchase_price))
        st.metric("Purchase date", format_date(asset.purchase_date))
    with col3:
        st.metric("Created", format_datetime(asset.created_at))
        st.metric("Updated", format_datetime(asset.updated_at))

    details = {
        "Serial number": asset.serial_number,
        "Brand": asset.brand,
        "Model": asset.model,
        "Supplier": asset.supplier_vendor,
        "Warranty": f"{format_date(asset.warranty_start_date)} – {format_date(asset.warranty_end_date)}"
        if asset.warranty_start_date or asset.warranty_end_date else None,
        "Warranty details": asset.warranty_details,
        "Description": asset.description,
        "Notes": asset.notes,
    }
    for label, value in details.items():
        if value:
            st.markdown(f"**{label}:** {value}")

    st.markdown(f"#### Assignments ({len(asset.assignments)})")
    for a in asset.assignments:
        active = "current" if a.is_active else f"returned {format_date(a.return_date)}"
        st.write(f"{a.assigned_to_name} · {a.department or '-'} · from {format_date(a.assignment_date)} ({active})")

    st.markdown(f"#### Maintenance ({len(asset.maintenance)})")
    for m in asset.maintenance:
        cost = f" · {format_currency(m.cost)}" if m.cost is not None else ""
        st.write(f"{m.maintenance_type.value.title()} · {m.status.value.replace('_', ' ')} · {m.description}{cost}")

    st.markdown(f"#### Documents ({len(asset.documents)})")
    for d in asset.documents:
        label = f"{d.document_name} ({d.document_type.value})"
        st.markdown(f"[{label}]({d.file_url})" if d.file_url else label)

    col_edit, col_close = st.columns(2)
    if col_edit.button("Edit", key="asset_detail_edit", use_container_width=True):
        ss["asset_edit_id"] = asset.id
        ss["asset_form_open"] = True
        ss["asset_view_id"] = None
        st.rerun()
    if col_close.button("Close", key="asset_detail_close", use_container_width=True):
        ss["asset_view_id"] = None
        st.rerun()


def render_delete_confirm(store: AssetStore, asset: Asset) -> None:
    ss = st.session_state
    st.markdown("---")
    st.warning(f'Are you sure you want to delete "{asset.name}"? This action cannot be undone.')
    col_cancel, col_delete = st.columns(2)
    if col_cancel.button("Cancel", key="asset_delete_cancel", use_container_width=True):
        ss["asset_delete_id"] = None
        st.rerun()
    if col_delete.button("Delete", key="asset_delete_confirm", type="primary", use_container_width=True):
        result = store.delete(asset.id)
        if IS_DEV:
            track_result(ss, "delete", result, asset_id=asset.id)
        report(result, "Asset deleted", "Failed to delete asset")
        if result.ok:
            ss["asset_delete_id"] = None
            ss.pop("asset_selected_id", None)
        st.rerun()


def render_assets() -> None:
    if not require_auth():
        return
    ss = st.session_state
    ensure_assets_loaded()
    store = get_store()

    col_title, col_export, col_add = st.columns([6, 1, 1])
    with col_title:
        st.markdown("## Assets")
        st.caption("Manage your asset inventory and tracking")
    with col_export:
        st.download_button(
            "⬇ Export",
            build_assets_csv(store.assets),
            file_name=export_filename(),
            mime="text/csv",
            use_container_width=True,
        )
    with col_add:
        if st.button("➕ Add Asset", key="asset_add", type="primary", use_container_width=True):
            ss["asset_edit_id"] = None
            ss["asset_form_open"] = True
            st.rerun()

    filters = render_filters(store)
    if filters != store.last_filters and (filters.has_active_filters or store.last_filters is not None):
        result = store.list(filters)
        if IS_DEV:
            track_result(ss, "list", result, filters=filters.model_dump(mode="json", exclude_none=True))

    by_id = {a.id: a for a in store.assets}

    if ss["asset_form_open"]:
        render_asset_form(store, by_id.get(ss["asset_edit_id"]))
    if ss["asset_view_id"]:
        render_asset_detail(store, ss["asset_view_id"])
    if ss["asset_delete_id"] in by_id:
        render_delete_confirm(store, by_id[ss["asset_delete_id"]])

    render_asset_table(store)


# --------------------------------------------------------------------
# DEV debug panel
# --------------------------------------------------------------------

def render_debug_panel() -> None:
    ss = st.session_state
    with st.sidebar.expander("🛠 State debug"):
        st.caption(f"ENV={ENV}")
        for event in get_recent_events(ss, limit=15):
            st.text(f"{event['ts']} {event['name']} {event.get('details', '')}")
        st.download_button("Export snapshot", export_snapshot_json(ss, DEBUG_KEYS),
                           file_name="asset_debug_snapshot.json", mime="application/json")
        if st.button("Clear history", key="debug_clear"):
            clear_debug_history(ss)
            st.rerun()


def main() -> None:
    init_state()
    ss = st.session_state

    # Logged-out users always land on Login; stale page names fall back too
    if not is_authenticated():
        ss["nav_page"] = "Login"
    elif ss.get("nav_page") not in PAGES:
        ss["nav_page"] = "Dashboard"

    nav_page = ss["nav_page"]
    print(f"[ROUTING] page={nav_page} | token_present={bool(ss.get('access_token'))}")

    render_sidebar()
    if ENABLE_DEBUG_UI:
        render_debug_panel()
    render_toasts()

    if nav_page == "Dashboard":
        render_dashboard()
    elif nav_page == "Assets":
        render_assets()
    else:
        render_login()


if __name__ == "__main__":
    main()
