"""Bill and tax computation. Pure functions, no state is touched here."""

from decimal import Decimal
from typing import Iterable, List, Mapping, Tuple

from .money import ZERO, to_money
from .schemas import BillSheetItem, FinanceConfig, Student, TaxConfig


def compute_tax(new_bill: Decimal, tax_config: TaxConfig) -> Decimal:
    if not tax_config.is_tax_enabled or new_bill <= 0:
        return ZERO
    return to_money(new_bill * tax_config.total_rate / Decimal("100"))


def compute_charge(
    class_bill_schedule: Mapping[str, Decimal],
    category: str,
    is_end_of_cycle_billing: bool,
    tax_config: TaxConfig,
) -> Tuple[Decimal, Decimal]:
    """
    Amount newly owed in one transaction as (new_bill, tax_amount).

    Arrears-only transactions bill nothing. A category missing from the schedule
    bills 0; schedules are sparse.
    """
    if not is_end_of_cycle_billing:
        return ZERO, ZERO
    new_bill = to_money(class_bill_schedule.get(category, ZERO))
    return new_bill, compute_tax(new_bill, tax_config)


def build_bill_sheet(
    students: Iterable[Student],
    config: FinanceConfig,
    class_name: str,
    is_new_term: bool = False,
) -> List[BillSheetItem]:
    """Bill previews for every learner of a class: arrears plus, at term end, every category's bill."""
    schedule = config.schedule_for(class_name)
    sheet: List[BillSheetItem] = []
    for student in students:
        if student.current_class != class_name:
            continue
        items = {}
        if is_new_term:
            items = {cat: to_money(schedule.get(cat, ZERO)) for cat in config.categories}
        items_total = sum(items.values(), ZERO)
        tax_amount = compute_tax(items_total, config.tax_config)
        arrears = student.outstanding_balance
        sheet.append(
            BillSheetItem(
                student_id=student.id,
                name=student.full_name,
                serial_id=student.serial_id,
                arrears=arrears,
                items=items,
                tax_amount=tax_amount,
                total=to_money(arrears + items_total + tax_amount),
            )
        )
    return sheet
