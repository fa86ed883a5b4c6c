"""Plain-text estimate summary for email and SMS sharing."""
from typing import Sequence

from catalog.formatting import format_capacity, format_currency
from schemas.estimate import Estimate


def text_summary(
    estimate: Estimate,
    company_name: str = "CoolSeason HVAC",
    company_contact: Sequence[str] = (),
) -> str:
    lines = [f"{company_name} Estimate", *company_contact]
    lines += [
        f"Customer: {estimate.customer_name}",
        f"Address: {estimate.address}",
        f"Phone: {estimate.phone}  Email: {estimate.email}",
        "",
        "Systems:",
    ]
    for system in estimate.enabled_systems:
        capacity = format_capacity(system.tonnage, system.equipment_type)
        head = f"- {system.name} | {system.equipment_type.value} | {capacity}"
        selected = system.selected_option
        if selected is None:
            lines.append(f"{head} | No selection")
            continue
        seer = f"{int(selected.seer)} SEER " if selected.seer else ""
        lines.append(
            f"{head} | {selected.tier.value} {seer}{selected.stage} | {format_currency(selected.price)}"
        )

    lines.append("")
    lines.append("Additional Equipment:")
    enabled_add_ons = [a for a in estimate.add_ons if a.enabled]
    if not enabled_add_ons:
        lines.append("- None")
    for add_on in enabled_add_ons:
        lines.append(f"- {add_on.name}: {format_currency(add_on.price)}")

    lines.append("")
    lines.append("Totals:")
    lines.append(f"- Systems: {format_currency(estimate.systems_subtotal)}")
    lines.append(f"- Add-Ons: {format_currency(estimate.add_ons_subtotal)}")
    lines.append(f"- Total: {format_currency(estimate.grand_total)}")
    return "\n".join(lines)
