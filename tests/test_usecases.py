"""Casos de uso montados pelo contexto da aplicação."""
from __future__ import annotations

import pytest

from application.dto.courier_dto import CourierMetricsDTO
from config.providers import SETTINGS_OPTION_KEY, provider_defaults
from domain.errors import AdapterError, StorageError, ValidationError


class _FailingAdapter:
    def fetch(self, phone):
        raise AdapterError("redx", "upstream 502")


class _FixedAdapter:
    def __init__(self, courier, delivered, returned, cancelled):
        self.courier = courier
        self.counters = (delivered, returned, cancelled)

    def fetch(self, phone):
        d, r, c = self.counters
        return CourierMetricsDTO(phone=phone, courier=self.courier, delivered=d, returned=r, cancelled=c)


def test_context_enables_mock_by_default(context):
    assert context.registry.has_adapter("mock")
    assert context.registry.is_enabled("mock")


def test_refresh_phone_upserts_each_result(context):
    context.registry.register("redx", _FailingAdapter())
    context.registry.register("steadfast", _FixedAdapter("steadfast", 0, 2, 2))
    context.provider_settings().toggle("redx", True)
    context.provider_settings().toggle("steadfast", True)

    report = context.refresh().refresh_phone("+880 1700-000000")

    assert report.phone == "+8801700000000"
    assert report.count == 2
    assert sorted(report.providers) == ["mock", "steadfast"]
    assert report.errors == {"redx": "upstream 502"}

    summary = context.repository.get_by_phone("+8801700000000")
    assert (summary.delivered, summary.returned, summary.cancelled) == (3, 3, 2)
    assert summary.risk_ratio == 0.625


def test_refresh_twice_replaces_rows(context):
    job = context.refresh()
    job.refresh_phone("+8801")
    job.refresh_phone("+8801")

    rows = context.repository.get_by_phone_per_provider("+8801")
    assert len(rows) == 1
    assert (rows[0].delivered, rows[0].returned) == (3, 1)


def test_scheduled_refresh_covers_every_known_phone(context):
    context.importer().execute("+8801", "pathao", 1, 0, 0)
    context.importer().execute("+8802", "redx", 0, 1, 0)

    reports = context.refresh().execute()

    assert [r.phone for r in reports] == ["+8801", "+8802"]
    assert all(r.providers == ["mock"] for r in reports)
    assert context.repository.get_by_phone("+8802").total_orders == 5


def test_scheduled_refresh_reloads_provider_settings(context):
    context.importer().execute("+8801", "pathao", 1, 0, 0)
    context.repository.set_option(SETTINGS_OPTION_KEY, {"mock": {"enabled": False}})

    reports = context.refresh().execute()

    assert reports[0].count == 0
    assert not context.registry.is_enabled("mock")


def test_check_phone_returns_cached_summary(context):
    context.repository.upsert("+8801700000000", "mock", 3, 1, 0)

    data = context.check().execute("+8801700000000")

    assert data["cached"] is True
    assert data["providers"] == {}
    assert data["total_orders"] == 4
    assert data["risk_ratio"] == 0.25
    assert data["completion_ratio"] == 0.75


def test_check_phone_falls_back_to_live_fetch_without_persisting(context):
    data = context.check().execute("01700000000")

    assert data["cached"] is False
    assert data["phone"] == "+1700000000"
    assert data["providers"]["mock"]["delivered"] == 3
    assert data["errors"] == {}
    assert context.repository.get_by_phone("+1700000000") is None


def test_check_phone_rejects_empty_phone(context):
    with pytest.raises(ValidationError):
        context.check().execute("  ")


def test_import_validates_input(context):
    with pytest.raises(ValidationError):
        context.importer().execute("+8801", "fedex", 1, 0, 0)
    with pytest.raises(ValidationError):
        context.importer().execute("", "mock", 1, 0, 0)
    with pytest.raises(ValidationError):
        context.importer().execute("+8801", "mock", 1, -2, 0)

    record = context.importer().execute("+8801", " Pathao ", "4", 0, 1)
    assert record.courier == "pathao"
    assert record.delivered == 4
    assert record.cancel_ratio == 0.2


def test_delete_use_case(context):
    record = context.importer().execute("+8801", "mock", 1, 0, 0)
    assert context.deleter().execute(record.id) is True
    assert context.deleter().execute(record.id) is False


def test_lookup_and_dashboard(context):
    context.importer().execute("+8801", "mock", 3, 1, 0)
    context.importer().execute("+8801", "redx", 0, 0, 4)
    context.importer().execute("+8802", "pathao", 5, 0, 0)

    lookup = context.lookup().execute("+8801")
    assert lookup["summary"]["total_orders"] == 8
    assert lookup["risk"] == "62.50%"
    assert [p["courier"] for p in lookup["providers"]] == ["redx", "mock"]

    assert context.lookup().execute("+8899")["summary"] is None

    overview = context.dashboard().execute(top_limit=1, recent_limit=2)
    assert overview["summary"]["customers"] == 2
    assert [p["courier"] for p in overview["providers"]] == ["mock", "pathao", "redx"]
    assert [t["phone"] for t in overview["top_risk"]] == ["+8801"]
    assert len(overview["recent"]) == 2


def test_provider_settings_persist_and_sync_registry(context):
    manager = context.provider_settings()
    manager.toggle("mock", False)

    assert context.repository.get_option(SETTINGS_OPTION_KEY)["mock"]["enabled"] is False
    assert not context.registry.is_enabled("mock")
    assert manager.load()["mock"]["enabled"] is False

    with pytest.raises(ValidationError):
        manager.toggle("fedex", True)


def test_install_and_uninstall(context):
    lifecycle = context.lifecycle()
    lifecycle.install()
    assert context.repository.get_option(SETTINGS_OPTION_KEY) == provider_defaults()

    context.importer().execute("+8801", "mock", 1, 0, 0)
    lifecycle.install()
    assert context.repository.get_by_phone("+8801") is not None

    lifecycle.uninstall()
    with pytest.raises(StorageError):
        context.repository.get_summary()


def test_refresh_skips_invalid_payloads(context):
    context.registry.register("steadfast", _FixedAdapter("steadfast", -1, 0, 0))
    context.provider_settings().toggle("steadfast", True)

    report = context.refresh().refresh_phone("+8801")

    assert report.providers == ["mock"]
    assert "steadfast" in report.errors
    assert [r.courier for r in context.repository.get_by_phone_per_provider("+8801")] == ["mock"]


def test_check_phone_rejects_unknown_provider(context):
    with pytest.raises(ValidationError) as excinfo:
        context.check().execute("+8801", ["fedex"])
    assert excinfo.value.code == "invalid_provider"

    # também com dados em cache
    context.repository.upsert("+8801", "mock", 1, 0, 0)
    with pytest.raises(ValidationError):
        context.check().execute("+8801", ["mock", "fedex"])


def test_refresh_phone_rejects_unknown_provider(context):
    with pytest.raises(ValidationError):
        context.refresh().refresh_phone("+8801", ["fedex"])
    assert context.repository.get_by_phone("+8801") is None


def test_saved_settings_report_enabled_providers(context):
    clean = context.provider_settings().save({"redx": {"enabled": "on"}})
    assert [s for s, f in clean.items() if f["enabled"]] == ["redx"]
    assert list(context.registry.resolve()) == []
