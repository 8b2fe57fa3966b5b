# asset_frontend/conftest.py
# Shared fixtures: an in-memory stand-in for the Supabase REST client

import re
import sys
import uuid
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from asset_frontend.api_client import ApiError
from asset_frontend.auth import SessionAuth
from asset_frontend.asset_store import AssetStore

_ILIKE_VALUE = re.compile(r'\.ilike\."((?:[^"\\]|\\.)*)"')


def _like_regex(quoted_body: str) -> re.Pattern:
    """PostgREST quoted value -> regex with ILIKE semantics (* and % any run, _ one char, \\ escapes)."""
    pattern = re.sub(r"\\(.)", r"\1", quoted_body)
    parts, i = [], 0
    while i < len(pattern):
        char = pattern[i]
        if char == "\\" and i + 1 < len(pattern):
            parts.append(re.escape(pattern[i + 1]))
            i += 2
            continue
        if char in "*%":
            parts.append(".*")
        elif char == "_":
            parts.append(".")
        else:
            parts.append(re.escape(char))
        i += 1
    return re.compile("".join(parts), re.IGNORECASE | re.DOTALL)
_BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


class FakeSupabaseClient:
    """
    Interprets the PostgREST parameters the store sends against in-memory
    tables. Supports eq/gte/lte, the search `or` group, ordering, and the
    embedded category select.
    """

    def __init__(self):
        self.tables = {
            "assets": [],
            "asset_categories": [],
            "asset_assignments": [],
            "asset_maintenance": [],
            "asset_documents": [],
        }
        self.failing_tables = set()
        self.fail_next = None
        self.calls = []
        self._clock = 0

    # helpers ------------------------------------------------------------

    def next_timestamp(self) -> str:
        self._clock += 1
        return (_BASE_TIME + timedelta(seconds=self._clock)).isoformat()

    def seed(self, table, **row):
        row.setdefault("id", uuid.uuid4().hex)
        row.setdefault("created_at", self.next_timestamp())
        row.setdefault("updated_at", row["created_at"])
        self.tables[table].append(row)
        return row

    def _check(self, op, table):
        self.calls.append((op, table))
        if table in self.failing_tables:
            raise ApiError(f"relation {table} unavailable", 500)
        if self.fail_next is not None:
            exc, self.fail_next = self.fail_next, None
            raise exc

    def _embed(self, row, select):
        row = dict(row)
        if select and "category:asset_categories" in select:
            cats = {c["id"]: c for c in self.tables["asset_categories"]}
            row["category"] = dict(cats[row["category_id"]]) if row.get("category_id") in cats else None
        return row

    @staticmethod
    def _matches(row, key, value):
        if key == "or":
            like = _like_regex(_ILIKE_VALUE.search(value).group(1))
            return any(like.fullmatch(row.get(c) or "") for c in ("name", "description", "serial_number"))
        op, _, operand = value.partition(".")
        current = row.get(key)
        if op == "eq":
            return current is not None and str(current) == operand
        if current is None:
            return False
        if op == "gte":
            return str(current) >= operand
        if op == "lte":
            return str(current) <= operand
        raise AssertionError(f"unsupported operator {op}")

    def _filter(self, table, params):
        select, order, rows = None, None, list(self.tables[table])
        for key, value in params or []:
            if key == "select":
                select = value
            elif key == "order":
                order = value
            else:
                rows = [r for r in rows if self._matches(r, key, value)]
        if order:
            column, _, direction = order.partition(".")
            rows.sort(key=lambda r: r.get(column) or "", reverse=(direction == "desc"))
        return rows, select

    # client surface -----------------------------------------------------

    def select(self, table, params=None):
        self._check("select", table)
        rows, select = self._filter(table, params)
        return [self._embed(r, select) for r in rows]

    def insert(self, table, row, params=None):
        self._check("insert", table)
        stamp = self.next_timestamp()
        stored = {"id": uuid.uuid4().hex, **row, "created_at": stamp, "updated_at": stamp}
        self.tables[table].append(stored)
        _, select = self._filter(table, params)
        return [self._embed(stored, select)]

    def update(self, table, patch, params=None):
        self._check("update", table)
        rows, select = self._filter(table, params)
        stamp = self.next_timestamp()
        for r in rows:
            r.update(patch)
            r["updated_at"] = stamp
        return [self._embed(r, select) for r in rows]

    def delete(self, table, params=None):
        self._check("delete", table)
        rows, _ = self._filter(table, params)
        self.tables[table] = [r for r in self.tables[table] if r not in rows]
        return rows


@pytest.fixture
def fake_client():
    return FakeSupabaseClient()


@pytest.fixture
def session_state():
    return {
        "access_token": "access-abc",
        "refresh_token": "refresh-abc",
        "current_user": {"id": "user-1", "email": "owner@example.co.za"},
        "is_authenticated": True,
    }


@pytest.fixture
def store(fake_client, session_state):
    return AssetStore(fake_client, SessionAuth(session_state))


@pytest.fixture
def categories(fake_client):
    return {
        "laptops": fake_client.seed("asset_categories", name="Laptops"),
        "vehicles": fake_client.seed("asset_categories", name="Vehicles"),
    }


@pytest.fixture
def seeded_assets(fake_client, categories):
    """Five assets, oldest first."""
    rows = [
        dict(name="Dell Latitude 5440", description="Finance team laptop", serial_number="DL-5440-001",
             category_id=categories["laptops"]["id"], location="Gauteng", condition_status="good",
             asset_status="active", purchase_date="2023-03-14", purchase_price=18999.0),
        dict(name="Toyota Hilux", description="Site vehicle", serial_number="VIN-HX-77",
             category_id=categories["vehicles"]["id"], location="Western Cape", condition_status="fair",
             asset_status="in_repair", purchase_date="2021-07-01", purchase_price=520000.0),
        dict(name="MacBook Pro 14", description=None, serial_number="C02-MBP-14",
             category_id=categories["laptops"]["id"], location="Western Cape", condition_status="excellent",
             asset_status="active", purchase_date="2024-01-20", purchase_price=42999.5),
        dict(name="Office Printer", description="Shared laser printer, second floor", serial_number=None,
             category_id=None, location="Gauteng", condition_status="poor",
             asset_status="retired", purchase_date=None, purchase_price=None),
        dict(name="Forklift", description="Warehouse forklift (diesel)", serial_number="FL-2",
             category_id="deleted-category", location="KwaZulu-Natal", condition_status="good",
             asset_status="disposed", purchase_date="2019-11-05", purchase_price=0.0),
    ]
    return [fake_client.seed("assets", **row) for row in rows]
