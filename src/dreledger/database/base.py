"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Iterable, Optional

# Import entities directly to avoid circular import through domain/__init__.py
from dreledger.domain.entities import (
    Asset,
    BankTransaction,
    CardStatus,
    CardTransaction,
    Category,
    CreditCard,
    FixedAsset,
    FixedAssetSnapshot,
    Institution,
    InsurancePolicy,
    InvestmentSnapshot,
    LedgerSnapshot,
    Liability,
)


class Database(ABC):
    """Abstract record store for dreledger."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Category operations
    @abstractmethod
    def add_category(self, category: Category) -> str:
        """Store a category. Returns category ID."""
        pass

    @abstractmethod
    def get_category(self, category_id: str) -> Optional[Category]:
        """Get category by ID."""
        pass

    @abstractmethod
    def list_categories(self) -> list[Category]:
        """List all categories."""
        pass

    # Institution operations
    @abstractmethod
    def add_institution(self, institution: Institution) -> str:
        """Store an institution. Returns institution ID."""
        pass

    @abstractmethod
    def get_institution(self, institution_id: str) -> Optional[Institution]:
        """Get institution by ID."""
        pass

    @abstractmethod
    def list_institutions(self) -> list[Institution]:
        """List all institutions."""
        pass

    # Credit card operations
    @abstractmethod
    def add_credit_card(self, card: CreditCard) -> str:
        """Store a credit card. Returns card ID."""
        pass

    @abstractmethod
    def get_credit_card(self, card_id: str) -> Optional[CreditCard]:
        """Get credit card by ID."""
        pass

    @abstractmethod
    def list_credit_cards(self) -> list[CreditCard]:
        """List all credit cards."""
        pass

    # Asset operations
    @abstractmethod
    def add_asset(self, asset: Asset) -> str:
        """Store an investment asset. Returns asset ID."""
        pass

    @abstractmethod
    def get_asset(self, asset_id: str) -> Optional[Asset]:
        """Get asset by ID."""
        pass

    @abstractmethod
    def list_assets(self) -> list[Asset]:
        """List all assets."""
        pass

    # Bank transaction operations
    @abstractmethod
    def add_bank_transactions(self, transactions: Iterable[BankTransaction]) -> list[str]:
        """Store bank transactions in one commit. Returns their IDs."""
        pass

    @abstractmethod
    def get_bank_transaction(self, transaction_id: str) -> Optional[BankTransaction]:
        """Get bank transaction by ID."""
        pass

    @abstractmethod
    def list_bank_transactions(
        self, institution_id: Optional[str] = None
    ) -> list[BankTransaction]:
        """List bank transactions, optionally filtered by institution."""
        pass

    # Card transaction operations
    @abstractmethod
    def add_card_transactions(self, transactions: Iterable[CardTransaction]) -> list[str]:
        """Store card installments in one commit. Returns their IDs."""
        pass

    @abstractmethod
    def list_card_transactions(self, card_id: Optional[str] = None) -> list[CardTransaction]:
        """List card transactions, optionally filtered by card."""
        pass

    @abstractmethod
    def update_card_transaction_status(
        self, transaction_ids: Iterable[str], status: CardStatus
    ) -> int:
        """Set the status of card transactions. Returns the number updated."""
        pass

    # Investment snapshot operations
    @abstractmethod
    def save_investment_snapshot(self, snapshot: InvestmentSnapshot) -> str:
        """Insert or replace the closing of an asset for its month."""
        pass

    @abstractmethod
    def list_investment_snapshots(
        self, asset_id: Optional[str] = None
    ) -> list[InvestmentSnapshot]:
        """List investment snapshots, optionally filtered by asset."""
        pass

    # Fixed asset operations
    @abstractmethod
    def add_fixed_asset(self, asset: FixedAsset) -> str:
        """Store a fixed asset. Returns its ID."""
        pass

    @abstractmethod
    def get_fixed_asset(self, asset_id: str) -> Optional[FixedAsset]:
        """Get fixed asset by ID."""
        pass

    @abstractmethod
    def list_fixed_assets(self) -> list[FixedAsset]:
        """List all fixed assets."""
        pass

    @abstractmethod
    def save_fixed_asset_snapshot(self, snapshot: FixedAssetSnapshot) -> str:
        """Insert or replace the valuation of a fixed asset for its month."""
        pass

    @abstractmethod
    def list_fixed_asset_snapshots(
        self, fixed_asset_id: Optional[str] = None
    ) -> list[FixedAssetSnapshot]:
        """List fixed asset valuations, optionally filtered by asset."""
        pass

    # Liability and insurance operations
    @abstractmethod
    def add_liability(self, liability: Liability) -> str:
        """Store a liability. Returns its ID."""
        pass

    @abstractmethod
    def list_liabilities(self) -> list[Liability]:
        """List all liabilities."""
        pass

    @abstractmethod
    def add_insurance_policy(self, policy: InsurancePolicy) -> str:
        """Store an insurance policy. Returns its ID."""
        pass

    @abstractmethod
    def list_insurance_policies(self) -> list[InsurancePolicy]:
        """List all insurance policies."""
        pass

    def load_snapshot(self) -> LedgerSnapshot:
        """Read every collection into an immutable LedgerSnapshot."""
        return LedgerSnapshot(
            categories=tuple(self.list_categories()),
            bank_transactions=tuple(self.list_bank_transactions()),
            card_transactions=tuple(self.list_card_transactions()),
            investment_snapshots=tuple(self.list_investment_snapshots()),
            institutions=tuple(self.list_institutions()),
            credit_cards=tuple(self.list_credit_cards()),
            assets=tuple(self.list_assets()),
            fixed_assets=tuple(self.list_fixed_assets()),
            fixed_asset_snapshots=tuple(self.list_fixed_asset_snapshots()),
            liabilities=tuple(self.list_liabilities()),
            insurance_policies=tuple(self.list_insurance_policies()),
        )
