"""Unit tests for bill and tax computation."""

from decimal import Decimal

import pytest

from feeledger.ledger.billing import build_bill_sheet, compute_charge, compute_tax
from feeledger.ledger.engine import LedgerEngine
from feeledger.ledger.schemas import FinanceConfig, TaxConfig

GHANA_LEVIES = dict(
    vat_rate=Decimal("15"),
    nhil_rate=Decimal("2.5"),
    get_levy_rate=Decimal("2.5"),
    covid_levy_rate=Decimal("1"),
)


def test_end_of_cycle_bills_schedule_amount() -> None:
    new_bill, tax = compute_charge({"School Fees": Decimal("500")}, "School Fees", True, TaxConfig())
    assert new_bill == Decimal("500.00")
    assert tax == Decimal("0.00")


def test_arrears_only_bills_nothing() -> None:
    tax_config = TaxConfig(is_tax_enabled=True, **GHANA_LEVIES)
    assert compute_charge({"School Fees": Decimal("500")}, "School Fees", False, tax_config) == (
        Decimal("0.00"),
        Decimal("0.00"),
    )


def test_missing_category_resolves_to_zero() -> None:
    new_bill, tax = compute_charge({"School Fees": Decimal("500")}, "Transport Fees", True, TaxConfig())
    assert new_bill == Decimal("0.00")
    assert tax == Decimal("0.00")


def test_tax_at_twenty_one_percent() -> None:
    tax_config = TaxConfig(is_tax_enabled=True, **GHANA_LEVIES)
    new_bill, tax = compute_charge({"School Fees": Decimal("500")}, "School Fees", True, tax_config)
    assert new_bill == Decimal("500.00")
    assert tax == Decimal("105.00")


def test_tax_rounds_to_cents() -> None:
    tax_config = TaxConfig(is_tax_enabled=True, vat_rate=Decimal("15"))
    assert compute_tax(Decimal("333.33"), tax_config) == Decimal("50.00")
    assert compute_tax(Decimal("0.10"), TaxConfig(is_tax_enabled=True, vat_rate=Decimal("5"))) == Decimal("0.01")


@pytest.mark.parametrize(
    "enabled,new_bill",
    [(False, Decimal("500")), (True, Decimal("0")), (False, Decimal("0"))],
)
def test_tax_is_zero_when_disabled_or_nothing_billed(enabled: bool, new_bill: Decimal) -> None:
    tax_config = TaxConfig(
        is_tax_enabled=enabled,
        vat_rate=Decimal("99"),
        nhil_rate=Decimal("50"),
        get_levy_rate=Decimal("12.5"),
        covid_levy_rate=Decimal("7"),
    )
    assert compute_tax(new_bill, tax_config) == Decimal("0.00")


def test_finance_config_dedupes_categories() -> None:
    config = FinanceConfig(categories=["School Fees", " School Fees ", "", "Feeding Fees"])
    assert config.categories == ["School Fees", "Feeding Fees"]


def test_finance_config_rejects_negative_bill() -> None:
    with pytest.raises(ValueError):
        FinanceConfig(class_bills={"Basic 1": {"School Fees": Decimal("-1")}})


def test_bill_sheet_without_new_term_shows_arrears_only(make_student, finance_config, actor) -> None:
    engine = LedgerEngine()
    owing, _ = engine.process_payment(make_student(), "School Fees", "300", True, actor, finance_config)
    other_class = make_student(serial_id="UBA-002", current_class="Basic 2")

    sheet = build_bill_sheet([owing, other_class], finance_config, "Basic 1", is_new_term=False)

    assert len(sheet) == 1
    assert sheet[0].arrears == Decimal("200.00")
    assert sheet[0].items == {}
    assert sheet[0].tax_amount == Decimal("0.00")
    assert sheet[0].total == Decimal("200.00")


def test_bill_sheet_new_term_itemizes_every_category(make_student, finance_config) -> None:
    config = finance_config.model_copy(
        update={
            "categories": ["School Fees", "Feeding Fees", "Transport Fees"],
            "tax_config": TaxConfig(is_tax_enabled=True, vat_rate=Decimal("10")),
        }
    )
    sheet = build_bill_sheet([make_student()], config, "Basic 1", is_new_term=True)

    item = sheet[0]
    assert item.items == {
        "School Fees": Decimal("500.00"),
        "Feeding Fees": Decimal("120.00"),
        "Transport Fees": Decimal("0.00"),
    }
    assert item.tax_amount == Decimal("62.00")
    assert item.total == Decimal("682.00")
