"""
Plain-text bill formatting.

Used for emails, printing and sharing. Nothing here changes a result;
it only renders one.
"""

from typing import Sequence

from messbill.models.mess import BillResult, Overview


CURRENCY = "Rs."


def format_amount(value: float, currency: str = CURRENCY) -> str:
    return f"{currency} {value:,.2f}"


def format_count(value: float) -> str:
    """30.0 -> '30', 30.5 -> '30.5'"""
    return f"{value:g}"


def format_individual_bill(result: BillResult, currency: str = CURRENCY) -> str:
    """One member's bill breakdown, a line per component."""
    header = result.name
    if result.is_guest_only:
        header += " (Guest Only)"
    elif result.min_meals_applied:
        header += " (Min. meals applied)"

    lines = [header]
    if not result.is_guest_only:
        lines.append(f"Effective Meals: {format_count(result.effective_meals)}")
        lines.append(f"Meal Cost: {format_amount(result.meal_cost, currency)}")
        lines.append(
            f"Establishment Charge: {format_amount(result.establishment_charge, currency)}"
        )
    lines.append(f"Guest Charges: {format_amount(result.guest, currency)}")
    if result.fine > 0:
        lines.append(f"Fine: {format_amount(result.fine, currency)}")
    lines.append(f"Deposits: {format_amount(result.deposits, currency)}")
    lines.append(f"Total Bill: {format_amount(result.total_bill, currency)}")
    lines.append(f"Outstanding: {currency} {result.outstanding:,}")
    return "\n".join(lines)


def format_overview(overview: Overview, currency: str = CURRENCY) -> str:
    """Period summary shared by every member's bill."""
    return "\n".join([
        f"Total Members: {overview.total_members}",
        f"Total Meals: {format_count(overview.total_meals)}",
        f"Meal Rate: {format_amount(overview.meal_rate, currency)}",
        f"Establishment Charge: {format_amount(overview.establishment_charge, currency)}",
    ])


TABLE_COLUMNS = [
    ("Name", 16),
    ("Meals", 7),
    ("Meal Cost", 11),
    ("Est.", 9),
    ("Guest", 9),
    ("Fine", 8),
    ("Total", 11),
    ("Deposit", 11),
    ("Outstanding", 12),
]


def format_results_table(results: Sequence[BillResult]) -> str:
    """Fixed-width table of all bills, for printing."""
    header = " ".join(
        title.ljust(width) if i == 0 else title.rjust(width)
        for i, (title, width) in enumerate(TABLE_COLUMNS)
    )
    rule = "-" * len(header)
    lines = [header, rule]

    for r in results:
        # guest-only rows are marked with (G)
        label = r.name + (" (G)" if r.is_guest_only else "")
        if len(label) > 16:
            label = label[:15] + "…"
        cells = [
            label.ljust(16),
            format_count(r.effective_meals).rjust(7),
            f"{r.meal_cost:,.2f}".rjust(11),
            f"{r.establishment_charge:,.2f}".rjust(9),
            f"{r.guest:,.2f}".rjust(9),
            f"{r.fine:,.2f}".rjust(8),
            f"{r.total_bill:,.2f}".rjust(11),
            f"{r.deposits:,.2f}".rjust(11),
            f"{r.outstanding:,}".rjust(12),
        ]
        lines.append(" ".join(cells))

    lines.append(rule)
    total = sum(r.outstanding for r in results)
    lines.append(f"{'Total outstanding':<{len(header) - 12}}{total:>12,}")
    return "\n".join(lines)
