"""
Seed script for the finance settings row.

Inserts the default billable categories and the standard levy rates (VAT 15%, NHIL 2.5%,
GETFund 2.5%, COVID-19 1%) with tax switched off. Existing settings are left untouched
unless --force is given.
"""
import argparse
import asyncio
from decimal import Decimal

from feeledger.core import models  # noqa: F401
from feeledger.db.repositories import SqlAlchemyUnitOfWork
from feeledger.db.session import AsyncSessionLocal
from feeledger.ledger.schemas import DEFAULT_CATEGORIES, FinanceConfig, TaxConfig

DEFAULT_TAX = TaxConfig(
    vat_rate=Decimal("15"),
    nhil_rate=Decimal("2.5"),
    get_levy_rate=Decimal("2.5"),
    covid_levy_rate=Decimal("1"),
    is_tax_enabled=False,
)


async def seed(force: bool = False) -> None:
    async with AsyncSessionLocal() as session:
        async with SqlAlchemyUnitOfWork(session) as uow:
            existing = await session.get(models.FinanceSetting, 1)
            if existing and not force:
                print("Finance settings already present, skipping (use --force to overwrite)")
                return
            await uow.config.save(
                FinanceConfig(categories=list(DEFAULT_CATEGORIES), tax_config=DEFAULT_TAX)
            )
            await uow.commit()
    print("Finance settings seeded")


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed default finance settings")
    parser.add_argument("--force", action="store_true", help="Overwrite existing settings")
    args = parser.parse_args()
    asyncio.run(seed(force=args.force))


if __name__ == "__main__":
    main()
