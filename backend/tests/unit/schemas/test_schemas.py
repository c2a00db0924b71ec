# tests/unit/schemas/test_schemas.py
from __future__ import annotations

from datetime import datetime, timezone

from shortlink.schemas import LinkPageSchema, LinkSchema, ValidationResultSchema
from shortlink.services._shared.dto import PageMeta
from shortlink.services._shared.ports import ValidationResult
from shortlink.services.links.dto import LinkOut, LinkPageOut

CREATED = datetime(2025, 3, 1, 12, tzinfo=timezone.utc)


def _link(code="abc123") -> LinkOut:
    return LinkOut(
        id=1,
        short_code=code,
        original_url="https://example.com/a",
        owner_id=7,
        created_at=CREATED,
        expires_at=CREATED.replace(year=2026),
        click_count=3,
        is_active=True,
    )


def test_link_schema_builds_short_url_from_explicit_base():
    data = LinkSchema(base_url="https://s.example/").dump(_link())

    assert data["short_url"] == "https://s.example/abc123"
    assert data["created_at"] == "2025-03-01T12:00:00+00:00"
    assert data["click_count"] == 3


def test_link_schema_uses_configured_base(app):
    with app.app_context():
        assert LinkSchema().dump(_link())["short_url"] == "https://sho.rt/abc123"


def test_link_page_schema(app):
    page = LinkPageOut(
        items=(_link("a1"), _link("b2")),
        meta=PageMeta(page=1, limit=2, total=3, has_prev=False, has_next=True),
    )
    with app.app_context():
        data = LinkPageSchema().dump(page)

    assert [item["short_url"] for item in data["items"]] == [
        "https://sho.rt/a1",
        "https://sho.rt/b2",
    ]
    assert data["meta"] == {"page": 1, "limit": 2, "total": 3, "has_prev": False, "has_next": True}


def test_validation_result_schema_loads_result_object():
    schema = ValidationResultSchema()
    loaded = schema.loads(schema.dumps(ValidationResult(valid=True, username="alice")))
    assert loaded == ValidationResult(valid=True, username="alice")


def test_validation_result_schema_defaults_username():
    assert ValidationResultSchema().load({"valid": False}) == ValidationResult.invalid()
