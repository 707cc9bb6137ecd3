"""Tests for JSON state export and import."""

import json
from datetime import date
from decimal import Decimal

import pytest

from dreledger.database.factories import create_sqlite_database
from dreledger.domain.dre import aggregate
from dreledger.domain.entities import (
    Direction,
    LineKind,
    PeriodWindow,
    ReportGroup,
    ViewMode,
)
from dreledger.domain.errors import ValidationError
from dreledger.domain.net_worth import NetWorthService
from dreledger.domain.state import STORAGE_KEY, StateService


@pytest.fixture
def populated_db(
    temp_db,
    transaction_service,
    card_service,
    investment_service,
    sample_institutions,
    sample_categories,
    sample_card,
):
    transaction_service.record_operational(
        sample_institutions["bank"], Direction.IN, Decimal("5000"), sample_categories["salary"], date(2026, 1, 5)
    )
    transaction_service.record_transfer(
        sample_institutions["bank"], sample_institutions["broker"], Decimal("1000"), date(2026, 1, 6)
    )
    card_service.register_purchase(
        sample_card, date(2026, 1, 15), Decimal("1200"), sample_categories["groceries"], installment_count=12
    )
    asset_id = investment_service.create_asset("CDB", institution_id=sample_institutions["broker"])
    investment_service.close_month(asset_id, 1, 2026, Decimal("1010"), Decimal("1000"))
    return temp_db


@pytest.fixture
def other_db(tmp_path):
    db = create_sqlite_database(database_path=str(tmp_path / "other.db"))
    db.connect()
    db.initialize_schema()
    yield db
    db.disconnect()


def write_state(path, state):
    path.write_text(json.dumps({STORAGE_KEY: state}), encoding="utf-8")


def test_export_writes_storage_key(populated_db, tmp_path):
    path = tmp_path / "state.json"

    counts = StateService(populated_db).export_state(path)

    document = json.loads(path.read_text(encoding="utf-8"))
    assert list(document) == [STORAGE_KEY]
    state = document[STORAGE_KEY]
    assert counts["bank_transactions"] == 3
    assert counts["card_transactions"] == 12
    assert len(state["categories"]) == 4
    assert state["categories"][0]["report_group"] in {g.value for g in ReportGroup}
    assert state["bank_transactions"][0]["cash_date"] == "2026-01-05"


def test_export_import_preserves_report(populated_db, other_db, tmp_path):
    path = tmp_path / "state.json"
    StateService(populated_db).export_state(path)

    outcome = StateService(other_db).import_state(path)

    assert outcome["quarantined"] == []
    assert outcome["errors"] == []
    assert outcome["imported"]["card_transactions"] == 12
    for view in ViewMode:
        window = PeriodWindow(1, 2026, view_mode=view)
        assert aggregate(other_db.load_snapshot(), window) == aggregate(populated_db.load_snapshot(), window)


def test_import_quarantines_unknown_groups(other_db, tmp_path):
    path = tmp_path / "state.json"
    write_state(
        path,
        {
            "categories": [
                {"id": "c1", "name": "Salario", "report_group": "RECEITAS OPERACIONAIS", "kind": "receita"},
                {"id": "c2", "name": "Mystery", "report_group": "Not A Group", "kind": "expense"},
            ],
        },
    )

    outcome = StateService(other_db).import_state(path)

    assert outcome["imported"]["categories"] == 1
    assert len(outcome["quarantined"]) == 1
    assert outcome["quarantined"][0]["row"]["id"] == "c2"
    (category,) = other_db.list_categories()
    assert category.report_group == ReportGroup.OPERATING_REVENUE


def test_import_skips_unparseable_records(other_db, tmp_path):
    path = tmp_path / "state.json"
    write_state(
        path,
        {
            "categories": [{"id": "c1", "name": "Salary", "report_group": "Operating revenue", "kind": "income"}],
            "bank_transactions": [
                {"id": "ok", "cash_date": "2026-01-05", "direction": "in", "amount": "100", "category_id": "c1"},
                {"id": "bad-amount", "cash_date": "2026-01-05", "direction": "in", "amount": "abc"},
                {"id": "bad-date", "cash_date": "someday", "direction": "in", "amount": "1"},
                {"id": "bad-direction", "cash_date": "2026-01-05", "direction": "sideways", "amount": "1"},
                "not an object",
            ],
        },
    )

    outcome = StateService(other_db).import_state(path)

    assert outcome["imported"]["bank_transactions"] == 1
    assert {e["id"] for e in outcome["errors"]} == {"bad-amount", "bad-date", "bad-direction", None}
    assert aggregate(other_db.load_snapshot(), PeriodWindow(1, 2026)).operating_revenue == Decimal("100")


def test_import_forces_structural_lines_out_of_the_statement(other_db, tmp_path):
    path = tmp_path / "state.json"
    write_state(
        path,
        {
            "bank_transactions": [
                {
                    "id": "pay",
                    "cash_date": "10/01/2026",
                    "direction": "out",
                    "amount": "300",
                    "line_kind": "invoice_payment",
                    "affects_income_statement": True,
                }
            ],
        },
    )

    StateService(other_db).import_state(path)

    txn = other_db.get_bank_transaction("pay")
    assert txn.line_kind == LineKind.INVOICE_PAYMENT
    assert txn.affects_income_statement is False
    assert txn.cash_date == date(2026, 1, 10)


def test_import_reports_duplicates(populated_db, tmp_path):
    path = tmp_path / "state.json"
    StateService(populated_db).export_state(path)

    outcome = StateService(populated_db).import_state(path)

    assert outcome["imported"]["categories"] == 0
    assert len(outcome["errors"]) > 0


def test_import_rejects_foreign_documents(other_db, tmp_path):
    not_json = tmp_path / "broken.json"
    not_json.write_text("{", encoding="utf-8")
    wrong_key = tmp_path / "other.json"
    wrong_key.write_text(json.dumps({"some_other_app": {}}), encoding="utf-8")

    with pytest.raises(ValidationError):
        StateService(other_db).import_state(not_json)
    with pytest.raises(ValidationError):
        StateService(other_db).import_state(wrong_key)


@pytest.mark.parametrize("flag", ["false", "no", 0, 1, "true"])
def test_import_rejects_non_boolean_flags(other_db, tmp_path, flag):
    path = tmp_path / "state.json"
    write_state(
        path,
        {
            "categories": [
                {"id": "c1", "name": "Salary", "report_group": "Operating revenue", "kind": "income"},
                {"id": "c2", "name": "Gift", "report_group": "Operating revenue", "is_operating": flag},
            ],
            "bank_transactions": [
                {
                    "id": "flagged",
                    "cash_date": "2026-01-05",
                    "direction": "in",
                    "amount": "100",
                    "category_id": "c1",
                    "affects_income_statement": flag,
                },
                {
                    "id": "off",
                    "cash_date": "2026-01-05",
                    "direction": "in",
                    "amount": "50",
                    "category_id": "c1",
                    "affects_income_statement": False,
                },
            ],
        },
    )

    outcome = StateService(other_db).import_state(path)

    assert [e["id"] for e in outcome["errors"]] == ["flagged"]
    assert [q["row"]["id"] for q in outcome["quarantined"]] == ["c2"]
    assert other_db.get_bank_transaction("flagged") is None
    assert other_db.get_bank_transaction("off").affects_income_statement is False
    assert aggregate(other_db.load_snapshot(), PeriodWindow(1, 2026)).operating_revenue == 0


def test_net_worth_records_survive_export_and_import(
    temp_db, net_worth_service, other_db, tmp_path
):
    asset_id = net_worth_service.create_fixed_asset(
        "House", "real_estate", Decimal("400000"), Decimal("500000"), entity_id="fam"
    )
    net_worth_service.record_valuation(asset_id, 2, 2026, Decimal("520000"))
    net_worth_service.add_liability(
        "Mortgage", "financing", Decimal("200000"), entity_id="fam", end_date=date(2040, 1, 1)
    )
    net_worth_service.add_insurance_policy(
        "property", "Porto", Decimal("400000"), Decimal("1200"),
        date(2026, 1, 1), date(2026, 12, 31), fixed_asset_id=asset_id,
    )
    path = tmp_path / "state.json"

    counts = StateService(temp_db).export_state(path)
    outcome = StateService(other_db).import_state(path)

    assert counts["fixed_assets"] == 1
    assert counts["insurance_policies"] == 1
    assert outcome["errors"] == []
    assert outcome["imported"]["fixed_asset_snapshots"] == 1
    assert outcome["imported"]["liabilities"] == 1
    restored = NetWorthService(other_db)
    for month, year in ((None, None), (2, 2026)):
        assert restored.net_worth(month=month, year=year) == net_worth_service.net_worth(
            month=month, year=year
        )


def test_import_rejects_valuation_outside_calendar(other_db, tmp_path):
    path = tmp_path / "state.json"
    write_state(
        path,
        {
            "fixed_assets": [{"id": "fa1", "name": "House", "market_value": "100"}],
            "fixed_asset_snapshots": [
                {"id": "v1", "fixed_asset_id": "fa1", "month": 13, "year": 2026, "equity_value": "1"}
            ],
        },
    )

    outcome = StateService(other_db).import_state(path)

    assert outcome["imported"]["fixed_assets"] == 1
    assert [e["id"] for e in outcome["errors"]] == ["v1"]
    assert other_db.list_fixed_asset_snapshots() == []
