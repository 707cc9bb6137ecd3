"""Category domain service and report group resolution."""

import logging
import re
import unicodedata
import uuid
from typing import Any, Iterable, Mapping, Optional

from dreledger.database.base import Database
from dreledger.domain.entities import Category, CategoryKind, ReportGroup
from dreledger.domain.errors import (
    ConfigurationIntegrityError,
    ConflictError,
    DomainError,
    ValidationError,
    duplicate_category_name,
    report_group_drift,
    unknown_report_group,
)

logger = logging.getLogger(__name__)

# Labels used by the spreadsheets and the previous version of the ledger.
_LEGACY_GROUP_LABELS = {
    "RECEITAS OPERACIONAIS": ReportGroup.OPERATING_REVENUE,
    "CUSTO DE VIDA SOBREVIVÊNCIA": ReportGroup.SURVIVAL_LIVING_COST,
    "CUSTO DE VIDA – SOBREVIVÊNCIA": ReportGroup.SURVIVAL_LIVING_COST,
    "CUSTO DE VIDA": ReportGroup.SURVIVAL_LIVING_COST,
    "CUSTO DE VIDA CONFORTO": ReportGroup.COMFORT_LIVING_COST,
    "DESPESAS PROFISSIONAIS": ReportGroup.PROFESSIONAL_EXPENSES,
    "MOVIMENTAÇÕES NÃO OPERACIONAIS": ReportGroup.NON_OPERATING_MOVEMENTS,
    "RECEITAS NÃO OPERACIONAIS": ReportGroup.NON_OPERATING_MOVEMENTS,
    "RECEITAS FINANCEIRAS / VARIAÇÃO": ReportGroup.FINANCIAL_INCOME,
    "RECEITAS FINANCEIRAS": ReportGroup.FINANCIAL_INCOME,
    "INVESTIMENTOS REALIZADOS": ReportGroup.REALIZED_INVESTMENTS,
    "INVESTIMENTOS": ReportGroup.REALIZED_INVESTMENTS,
    "TRANSFERÊNCIAS INTERNAS": ReportGroup.INTERNAL_TRANSFERS,
}


def _normalize_label(value: str) -> str:
    """Uppercase, strip accents and collapse separators to underscores."""
    decomposed = unicodedata.normalize("NFKD", value)
    ascii_only = "".join(c for c in decomposed if not unicodedata.combining(c))
    return re.sub(r"[^A-Z0-9]+", "_", ascii_only.upper()).strip("_")


def _build_alias_index() -> dict[str, ReportGroup]:
    index: dict[str, ReportGroup] = {}
    for group in ReportGroup:
        index[_normalize_label(group.name)] = group
        index[_normalize_label(group.value)] = group
    for label, group in _LEGACY_GROUP_LABELS.items():
        index[_normalize_label(label)] = group
    return index


_GROUP_ALIASES = _build_alias_index()


def parse_report_group(value: Any) -> ReportGroup:
    """Map a report group label to the enumeration.

    Accepts the member itself, its value, its name or a known legacy label.

    Raises:
        ConfigurationIntegrityError: If the label is not a known group
    """
    if isinstance(value, ReportGroup):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ConfigurationIntegrityError(unknown_report_group(value))
    group = _GROUP_ALIASES.get(_normalize_label(value))
    if group is None:
        raise ConfigurationIntegrityError(unknown_report_group(value))
    return group


def parse_category_kind(value: Any) -> CategoryKind:
    """Map a category kind label (English or Portuguese) to the enumeration."""
    if isinstance(value, CategoryKind):
        return value
    aliases = {
        "INCOME": CategoryKind.INCOME,
        "RECEITA": CategoryKind.INCOME,
        "EXPENSE": CategoryKind.EXPENSE,
        "DESPESA": CategoryKind.EXPENSE,
        "TRANSFER": CategoryKind.TRANSFER,
        "TRANSFERENCIA": CategoryKind.TRANSFER,
    }
    kind = aliases.get(_normalize_label(str(value or "")))
    if kind is None:
        raise ValidationError(f"Unknown category kind '{value}'")
    return kind


def quarantine_categories(
    rows: Iterable[Mapping[str, Any]],
) -> tuple[list[Category], list[dict[str, Any]]]:
    """Split raw category rows into valid categories and quarantined rows.

    Each quarantined entry is {"row": <original row>, "reason": <message>}.
    """
    valid: list[Category] = []
    quarantined: list[dict[str, Any]] = []
    for row in rows:
        try:
            category_id = row.get("id")
            name = row.get("name")
            if not category_id or not name:
                raise ValidationError("Category requires 'id' and 'name'")
            is_operating = row.get("is_operating", True)
            if not isinstance(is_operating, bool):
                raise ValidationError(
                    f"'is_operating' must be true or false, got {is_operating!r}"
                )
            valid.append(
                Category(
                    id=str(category_id),
                    name=str(name),
                    report_group=parse_report_group(row.get("report_group")),
                    kind=parse_category_kind(row.get("kind", "expense")),
                    is_operating=is_operating,
                )
            )
        except DomainError as e:
            quarantined.append({"row": dict(row), "reason": str(e)})
    return valid, quarantined


class CategoryResolver:
    """Resolve category references against one category table."""

    def __init__(self, categories: Iterable[Category]):
        """Index categories by ID.

        Raises:
            ConfigurationIntegrityError: If any category declares a report
                group outside the enumeration
        """
        self._index: dict[str, Category] = {}
        drifted = []
        for category in categories:
            if not isinstance(category.report_group, ReportGroup):
                drifted.append(category.id)
                continue
            self._index[category.id] = category
        if drifted:
            raise ConfigurationIntegrityError(report_group_drift(drifted))

    def resolve(self, category_id: Optional[str]) -> Optional[Category]:
        """Return the category, or None for an orphan reference."""
        if category_id is None:
            return None
        return self._index.get(category_id)

    def __len__(self) -> int:
        return len(self._index)


class CategoryService:
    """Service for managing categories."""

    def __init__(self, db: Database):
        """Initialize category service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_category(
        self,
        name: str,
        report_group: Any,
        kind: Any = CategoryKind.EXPENSE,
        is_operating: bool = True,
        category_id: Optional[str] = None,
    ) -> str:
        """Create a category.

        Args:
            name: Category name
            report_group: Report group member or label
            kind: Category kind (income, expense, transfer)
            is_operating: Whether the category belongs to operating activity
            category_id: Optional explicit ID; generated when omitted

        Returns:
            Category ID

        Raises:
            ConfigurationIntegrityError: If the report group is unknown
            ConflictError: If a category with the same name or ID exists
            ValidationError: If the name is empty or the kind unknown
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Category name cannot be empty")

        group = parse_report_group(report_group)
        category_kind = parse_category_kind(kind)

        for existing in self.db.list_categories():
            if existing.name.casefold() == name.casefold():
                raise ConflictError(duplicate_category_name(name))

        if category_id is None:
            category_id = f"cat-{uuid.uuid4().hex[:10]}"
        elif self.db.get_category(category_id) is not None:
            raise ConflictError(f"Category '{category_id}' already exists")

        category = Category(
            id=category_id,
            name=name,
            report_group=group,
            kind=category_kind,
            is_operating=is_operating,
        )
        self.db.add_category(category)
        logger.info("Created category %s in group %s", category_id, group.value)
        return category_id

    def get_category(self, category_id: str) -> Optional[Category]:
        """Get category by ID."""
        return self.db.get_category(category_id)

    def list_categories(self) -> list[Category]:
        """List all categories."""
        return self.db.list_categories()

    def categories_by_group(self) -> dict[ReportGroup, list[Category]]:
        """Group categories by report group, in report order."""
        grouped: dict[ReportGroup, list[Category]] = {group: [] for group in ReportGroup}
        for category in self.db.list_categories():
            if isinstance(category.report_group, ReportGroup):
                grouped[category.report_group].append(category)
        return grouped
