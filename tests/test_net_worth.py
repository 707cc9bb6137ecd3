"""Tests for net worth over fixed assets, liabilities and insurance."""

from datetime import date
from decimal import Decimal

import pytest

from dreledger.cli.main import cli
from dreledger.domain.entities import (
    FixedAsset,
    FixedAssetCategory,
    FixedAssetSnapshot,
    InsuranceKind,
    InsurancePolicy,
    LedgerSnapshot,
    Liability,
    LiabilityKind,
)
from dreledger.domain.errors import NotFoundError, ValidationError
from dreledger.domain.net_worth import net_worth, valuation_as_of


def house(entity_id="fam", value="500000"):
    return FixedAsset(
        id="fa-house",
        name="House",
        category=FixedAssetCategory.REAL_ESTATE,
        acquisition_value=Decimal("400000"),
        market_value=Decimal(value),
        entity_id=entity_id,
    )


def car():
    return FixedAsset(
        id="fa-car",
        name="Car",
        category=FixedAssetCategory.VEHICLE,
        acquisition_value=Decimal("90000"),
        market_value=Decimal("80000"),
        entity_id="co",
    )


def mortgage(balance="200000", entity_id="fam"):
    return Liability(
        id="liab-mortgage",
        name="Mortgage",
        kind=LiabilityKind.FINANCING,
        outstanding_balance=Decimal(balance),
        entity_id=entity_id,
    )


def policy(policy_id, insured, fixed_asset_id=None):
    return InsurancePolicy(
        id=policy_id,
        kind=InsuranceKind.PROPERTY,
        insurer="Porto",
        insured_value=Decimal(insured),
        annual_premium=Decimal("1200"),
        start_date=date(2026, 1, 1),
        end_date=date(2026, 12, 31),
        fixed_asset_id=fixed_asset_id,
    )


def valuation(month, year, value, asset_id="fa-house"):
    return FixedAssetSnapshot(
        id=f"fav-{asset_id}-{year}-{month}",
        fixed_asset_id=asset_id,
        month=month,
        year=year,
        equity_value=Decimal(value),
    )


def test_net_worth_subtracts_debt_from_assets():
    snapshot = LedgerSnapshot(fixed_assets=(house(), car()), liabilities=(mortgage(),))

    worth = net_worth(snapshot)

    assert worth.fixed_assets == Decimal("580000")
    assert worth.liabilities == Decimal("200000")
    assert worth.net == Decimal("380000")


def test_leverage_is_debt_over_assets():
    snapshot = LedgerSnapshot(fixed_assets=(house(),), liabilities=(mortgage(),))

    assert net_worth(snapshot).leverage_percent == Decimal("40")


def test_entity_filter_applies_to_assets_and_debts():
    snapshot = LedgerSnapshot(
        fixed_assets=(house(), car()),
        liabilities=(mortgage(), mortgage("30000", entity_id="co")),
    )

    family = net_worth(snapshot, entity_id="fam")
    company = net_worth(snapshot, entity_id="co")

    assert (family.fixed_assets, family.liabilities) == (Decimal("500000"), Decimal("200000"))
    assert (company.fixed_assets, company.liabilities) == (Decimal("80000"), Decimal("30000"))


def test_ratios_are_unavailable_without_assets():
    worth = net_worth(LedgerSnapshot(liabilities=(mortgage(),)))

    assert worth.net == Decimal("-200000")
    assert worth.leverage_percent is None
    assert worth.coverage_percent is None


def test_insurance_coverage():
    snapshot = LedgerSnapshot(
        fixed_assets=(house(), car()),
        insurance_policies=(
            policy("p-house", "400000", "fa-house"),
            policy("p-life", "1000000"),
        ),
    )

    everyone = net_worth(snapshot)
    family = net_worth(snapshot, entity_id="fam")

    assert everyone.insured_value == Decimal("1400000")
    # The unattached life policy only counts for the whole family.
    assert family.insured_value == Decimal("400000")
    assert family.coverage_percent == Decimal("80")


def test_valuation_as_of_uses_latest_earlier_snapshot():
    history = [valuation(1, 2026, "510000"), valuation(3, 2026, "530000"), valuation(6, 2025, "1")]
    asset = house()

    assert valuation_as_of(asset, history) == Decimal("500000")
    assert valuation_as_of(asset, history, 2, 2026) == Decimal("510000")
    assert valuation_as_of(asset, history, 12, 2026) == Decimal("530000")
    assert valuation_as_of(asset, history, 5, 2025) == Decimal("500000")


def test_net_worth_as_of_month():
    snapshot = LedgerSnapshot(
        fixed_assets=(house(),),
        fixed_asset_snapshots=(valuation(1, 2026, "520000"),),
    )

    assert net_worth(snapshot, month=1, year=2026).fixed_assets == Decimal("520000")
    assert net_worth(snapshot).fixed_assets == Decimal("500000")
    with pytest.raises(ValidationError):
        net_worth(snapshot, month=13, year=2026)


class TestNetWorthService:
    """Test NetWorthService against the database."""

    def test_create_fixed_asset(self, net_worth_service):
        asset_id = net_worth_service.create_fixed_asset(
            "House", "real_estate", Decimal("400000"), Decimal("500000"), entity_id="fam"
        )

        assert asset_id.startswith("fa-")
        stored = net_worth_service.list_fixed_assets()[0]
        assert stored.category == FixedAssetCategory.REAL_ESTATE
        assert stored.market_value == Decimal("500000")

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"name": " "},
            {"market_value": Decimal("-1")},
            {"category": "boat"},
            {"participation_percent": Decimal("120")},
        ],
    )
    def test_create_fixed_asset_validation(self, net_worth_service, kwargs):
        args = {
            "name": "House",
            "category": "real_estate",
            "acquisition_value": Decimal("0"),
            "market_value": Decimal("1"),
        }
        args.update(kwargs)

        with pytest.raises(ValidationError):
            net_worth_service.create_fixed_asset(**args)

    def test_record_valuation_replaces_month(self, temp_db, net_worth_service):
        asset_id = net_worth_service.create_fixed_asset(
            "House", "real_estate", Decimal("0"), Decimal("500000"), asset_id="fa-house"
        )

        net_worth_service.record_valuation(asset_id, 1, 2026, Decimal("510000"))
        net_worth_service.record_valuation(asset_id, 1, 2026, Decimal("515000"))

        valuations = net_worth_service.list_valuations(asset_id)
        assert [(v.id, v.equity_value) for v in valuations] == [
            ("fav-fa-house-2026-1", Decimal("515000"))
        ]

    def test_record_valuation_requires_asset(self, net_worth_service):
        with pytest.raises(NotFoundError):
            net_worth_service.record_valuation("fa-missing", 1, 2026, Decimal("1"))

    def test_policy_validation(self, net_worth_service):
        with pytest.raises(ValidationError, match="before it starts"):
            net_worth_service.add_insurance_policy(
                "property", "Porto", Decimal("1"), Decimal("1"), date(2026, 2, 1), date(2026, 1, 1)
            )
        with pytest.raises(NotFoundError):
            net_worth_service.add_insurance_policy(
                "property",
                "Porto",
                Decimal("1"),
                Decimal("1"),
                date(2026, 1, 1),
                date(2026, 12, 31),
                fixed_asset_id="fa-missing",
            )

    def test_net_worth_from_database(self, net_worth_service):
        asset_id = net_worth_service.create_fixed_asset(
            "House", "real_estate", Decimal("0"), Decimal("500000"), entity_id="fam"
        )
        net_worth_service.add_liability("Mortgage", "financing", Decimal("125000"), entity_id="fam")
        net_worth_service.add_insurance_policy(
            "property", "Porto", Decimal("250000"), Decimal("900"),
            date(2026, 1, 1), date(2026, 12, 31), fixed_asset_id=asset_id,
        )

        worth = net_worth_service.net_worth(entity_id="fam")

        assert worth.net == Decimal("375000")
        assert worth.leverage_percent == Decimal("25")
        assert worth.coverage_percent == Decimal("50")


def test_patrimony_cli_report(cli_runner, temp_db):
    def run(*args):
        return cli_runner.invoke(cli, ["--db-path", temp_db.database_path, *args])

    result = run(
        "patrimony", "add-asset", "House", "--category", "real_estate",
        "--market-value", "500000", "--entity", "fam", "--id", "fa-house",
    )
    assert result.exit_code == 0, result.output
    assert run(
        "patrimony", "add-liability", "Mortgage", "--kind", "financing",
        "--balance", "200000", "--entity", "fam",
    ).exit_code == 0
    assert run(
        "patrimony", "add-policy", "--insurer", "Porto", "--insured-value", "400000",
        "--start", "2026-01-01", "--end", "2026-12-31", "--asset", "House",
    ).exit_code == 0
    assert run(
        "patrimony", "value", "--asset", "House", "--month", "3", "--year", "2026",
        "--equity", "550000",
    ).exit_code == 0

    current = run("patrimony", "report", "--entity", "fam")
    as_of_march = run("patrimony", "report", "--month", "3", "--year", "2026")
    listing = run("patrimony", "list")

    assert current.exit_code == 0, current.output
    assert "300,000.00" in current.output
    assert "40.0%" in current.output
    assert "80.0%" in current.output
    assert "350,000.00" in as_of_march.output
    assert "House" in listing.output
    assert "Mortgage" in listing.output


def test_patrimony_cli_rejects_month_without_year(cli_runner, temp_db):
    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "patrimony", "report", "--month", "3"]
    )

    assert result.exit_code == 1
    assert "--month and --year" in result.output
