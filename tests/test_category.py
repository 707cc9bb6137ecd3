"""Tests for categories and report group resolution."""

import pytest

from dreledger.cli.main import cli
from dreledger.domain.category import (
    CategoryResolver,
    parse_category_kind,
    parse_report_group,
    quarantine_categories,
)
from dreledger.domain.entities import Category, CategoryKind, ReportGroup
from dreledger.domain.errors import (
    ConfigurationIntegrityError,
    ConflictError,
    ValidationError,
)


@pytest.mark.parametrize(
    "label, group",
    [
        (ReportGroup.COMFORT_LIVING_COST, ReportGroup.COMFORT_LIVING_COST),
        ("Operating revenue", ReportGroup.OPERATING_REVENUE),
        ("survival_living_cost", ReportGroup.SURVIVAL_LIVING_COST),
        ("Financial income / Variation", ReportGroup.FINANCIAL_INCOME),
        ("RECEITAS OPERACIONAIS", ReportGroup.OPERATING_REVENUE),
        ("Custo de Vida Sobrevivência", ReportGroup.SURVIVAL_LIVING_COST),
        ("Transferências internas", ReportGroup.INTERNAL_TRANSFERS),
    ],
)
def test_parse_report_group(label, group):
    assert parse_report_group(label) is group


@pytest.mark.parametrize("label", ["", "Luxury", None, 3])
def test_parse_report_group_unknown(label):
    with pytest.raises(ConfigurationIntegrityError):
        parse_report_group(label)


def test_parse_category_kind():
    assert parse_category_kind("Despesa") == CategoryKind.EXPENSE
    assert parse_category_kind("income") == CategoryKind.INCOME
    with pytest.raises(ValidationError):
        parse_category_kind("other")


def test_quarantine_categories():
    valid, quarantined = quarantine_categories(
        [
            {"id": "a", "name": "Salary", "report_group": "Operating revenue", "kind": "income"},
            {"id": "b", "name": "Ghost", "report_group": "Ghost group"},
            {"id": "", "name": "No id", "report_group": "Operating revenue"},
        ]
    )

    assert [c.id for c in valid] == ["a"]
    assert [q["row"]["name"] for q in quarantined] == ["Ghost", "No id"]
    assert "Ghost group" in quarantined[0]["reason"]


def test_resolver_resolves_and_reports_orphans():
    resolver = CategoryResolver(
        [Category("a", "Salary", ReportGroup.OPERATING_REVENUE, CategoryKind.INCOME)]
    )

    assert resolver.resolve("a").name == "Salary"
    assert resolver.resolve("missing") is None
    assert resolver.resolve(None) is None
    assert len(resolver) == 1


def test_resolver_rejects_drifted_groups():
    with pytest.raises(ConfigurationIntegrityError, match="x, y"):
        CategoryResolver(
            [
                Category("y", "Old", "CUSTO FIXO", CategoryKind.EXPENSE),
                Category("x", "Older", "OUTROS", CategoryKind.EXPENSE),
            ]
        )


def test_create_category(category_service):
    category_id = category_service.create_category(
        "Rent", "survival_living_cost", kind="despesa"
    )

    category = category_service.get_category(category_id)
    assert category_id.startswith("cat-")
    assert category.report_group == ReportGroup.SURVIVAL_LIVING_COST
    assert category.kind == CategoryKind.EXPENSE
    assert category.is_operating


def test_create_category_duplicate_name(category_service):
    category_service.create_category("Rent", ReportGroup.SURVIVAL_LIVING_COST)

    with pytest.raises(ConflictError):
        category_service.create_category("rent", ReportGroup.COMFORT_LIVING_COST)


def test_create_category_duplicate_id(category_service):
    category_service.create_category("Rent", ReportGroup.SURVIVAL_LIVING_COST, category_id="c1")

    with pytest.raises(ConflictError):
        category_service.create_category("Other", ReportGroup.SURVIVAL_LIVING_COST, category_id="c1")


def test_create_category_validation(category_service):
    with pytest.raises(ValidationError):
        category_service.create_category("   ", ReportGroup.SURVIVAL_LIVING_COST)
    with pytest.raises(ConfigurationIntegrityError):
        category_service.create_category("Yacht", "Luxury")


def test_categories_by_group(category_service, sample_categories):
    grouped = category_service.categories_by_group()

    assert list(grouped) == list(ReportGroup)
    assert [c.name for c in grouped[ReportGroup.OPERATING_REVENUE]] == ["Salary"]
    assert grouped[ReportGroup.INTERNAL_TRANSFERS] == []


def test_category_create_command(cli_runner, temp_db):
    """Test creating a category from the CLI."""
    result = cli_runner.invoke(
        cli,
        [
            "--db-path",
            temp_db.database_path,
            "category",
            "create",
            "Rent",
            "--group",
            "survival_living_cost",
        ],
    )

    assert result.exit_code == 0
    assert "Created category 'Rent' in 'Survival living cost'" in result.output


def test_category_create_command_unknown_group(cli_runner, temp_db):
    result = cli_runner.invoke(
        cli,
        ["--db-path", temp_db.database_path, "category", "create", "Yacht", "--group", "Luxury"],
    )

    assert result.exit_code == 1
    assert "Unknown report group" in result.output


def test_category_list_command(cli_runner, temp_db, sample_categories):
    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "category", "list"])

    assert result.exit_code == 0
    assert "1. Operating revenue" in result.output
    assert "Salary (income, ID: cat-salary)" in result.output
    assert "8. Internal transfers" not in result.output


def test_category_list_command_empty(cli_runner, temp_db):
    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "category", "list"])

    assert result.exit_code == 0
    assert "No categories found" in result.output
