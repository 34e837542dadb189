from datetime import datetime
from decimal import Decimal
from types import SimpleNamespace

from site_erp.models import LabourContractor, LabourPayment
from site_erp.services.auto_expense_service import (
    aggregate_material_rows,
    format_supplier_names,
    get_auto_labour_expenses,
    get_auto_material_expenses,
    make_material_auto_id,
    slugify_material,
)


def material_row(site_id="S1", material="Cement", qty=None, rate=None, total_amt=None,
                 ledger_id="L1", entry_date=datetime(2024, 3, 1)):
    return SimpleNamespace(
        site_id=site_id,
        material=material,
        qty=qty,
        rate=rate,
        total_amt=total_amt,
        ledger_id=ledger_id,
        entry_date=entry_date,
    )


SITE_NAMES = {"S1": "Ring Road Package 1", "S2": "Canal Lining"}
LEDGER_NAMES = {"L1": "Alpha Traders", "L2": "Beta Suppliers", "L3": "Gamma", "L4": "Delta", "L5": "Epsilon"}


# ---------------------------------------------------------------------------
# Pure aggregation
# ---------------------------------------------------------------------------


def test_groups_material_case_insensitively_per_site():
    rows = [
        material_row(material="Cement", total_amt=Decimal("1000"), ledger_id="L1",
                     entry_date=datetime(2024, 3, 1)),
        material_row(material="cement ", qty=Decimal("2"), rate=Decimal("50"), ledger_id="L2",
                     entry_date=datetime(2024, 3, 5)),
        material_row(material="Sand", total_amt=Decimal("300"), entry_date=datetime(2024, 3, 2)),
    ]

    result = aggregate_material_rows(rows, SITE_NAMES, LEDGER_NAMES)

    assert [r.id for r in result] == ["AUTO_MSL_S1_cement", "AUTO_MSL_S1_sand"]
    cement = result[0]
    assert cement.expense_title == "Cement"
    assert cement.amount == Decimal("1100.00")
    assert cement.expense_date == datetime(2024, 3, 5)
    assert cement.payment_details == "Alpha Traders, Beta Suppliers"
    assert cement.summary == "Material Purchase (Auto)"
    assert cement.is_auto is True
    assert cement.site.site_name == "Ring Road Package 1"
    assert cement.site_id == "S1"


def test_materials_with_the_same_slug_share_one_row():
    rows = [
        material_row(material="Sand-1", total_amt=Decimal("100"), entry_date=datetime(2024, 3, 1)),
        material_row(material="sand 1", total_amt=Decimal("50"), ledger_id="L2",
                     entry_date=datetime(2024, 3, 4)),
    ]

    result = aggregate_material_rows(rows, SITE_NAMES, LEDGER_NAMES)

    assert len(result) == 1
    assert result[0].id == "AUTO_MSL_S1_sand_1"
    assert result[0].expense_title == "Sand-1"
    assert result[0].amount == Decimal("150.00")
    assert result[0].expense_date == datetime(2024, 3, 4)
    assert result[0].payment_details == "Alpha Traders, Beta Suppliers"


def test_same_material_on_different_sites_stays_separate():
    rows = [
        material_row(site_id="S1", total_amt=Decimal("100")),
        material_row(site_id="S2", total_amt=Decimal("200")),
    ]

    result = aggregate_material_rows(rows, SITE_NAMES, LEDGER_NAMES)

    assert sorted(r.id for r in result) == ["AUTO_MSL_S1_cement", "AUTO_MSL_S2_cement"]


def test_rows_without_site_or_material_are_ignored():
    rows = [
        material_row(site_id=None, total_amt=Decimal("100")),
        material_row(material="   ", total_amt=Decimal("100")),
        material_row(material=None, total_amt=Decimal("100")),
    ]

    assert aggregate_material_rows(rows, SITE_NAMES, LEDGER_NAMES) == []


def test_stored_total_wins_over_qty_times_rate():
    rows = [material_row(qty=Decimal("10"), rate=Decimal("10"), total_amt=Decimal("118"))]

    result = aggregate_material_rows(rows, SITE_NAMES, LEDGER_NAMES)

    assert result[0].amount == Decimal("118.00")


def test_unknown_supplier_and_site_fallbacks():
    rows = [material_row(site_id="S9", ledger_id="LX", total_amt=Decimal("10"))]

    result = aggregate_material_rows(rows, SITE_NAMES, LEDGER_NAMES)

    assert result[0].payment_details == "Unknown Ledger"
    assert result[0].site.site_name == "N/A"


def test_more_than_three_suppliers_are_summarised():
    rows = [
        material_row(ledger_id=ledger_id, total_amt=Decimal("1"))
        for ledger_id in ("L1", "L2", "L3", "L4", "L5", "L1")
    ]

    result = aggregate_material_rows(rows, SITE_NAMES, LEDGER_NAMES)

    assert result[0].payment_details == "Alpha Traders, Beta Suppliers, Gamma +2 more"
    assert result[0].amount == Decimal("6.00")


def test_format_supplier_names():
    assert format_supplier_names(["A"]) == "A"
    assert format_supplier_names(["A", "B", "C"]) == "A, B, C"
    assert format_supplier_names(["A", "B", "C", "D"]) == "A, B, C +1 more"


def test_material_slug_and_id():
    assert slugify_material("Aggregate 20mm (Machine Crushed)") == "aggregate_20mm_machine_crushed"
    assert slugify_material("!!!") == "material"
    assert len(slugify_material("x" * 80)) == 50
    assert make_material_auto_id("S1", " Steel TMT ") == "AUTO_MSL_S1_steel_tmt"


def test_ids_are_stable_across_calls():
    rows = [material_row(total_amt=Decimal("5"))]

    first = aggregate_material_rows(rows, SITE_NAMES, LEDGER_NAMES)
    second = aggregate_material_rows(rows, SITE_NAMES, LEDGER_NAMES)

    assert first == second


# ---------------------------------------------------------------------------
# Database backed projections
# ---------------------------------------------------------------------------


def test_material_projection_reads_ledger_rows(db, make_site, make_supplier, make_material_row):
    make_site("S1")
    make_site("S2", site_name="Canal Lining")
    supplier = make_supplier("Alpha Traders")
    make_material_row(supplier, site_id="S1", material="Cement", total_amt="700")
    make_material_row(supplier, site_id="S2", material="Sand", qty="3", rate="100")

    all_rows = get_auto_material_expenses(db)
    s2_rows = get_auto_material_expenses(db, "S2")

    assert {r.id for r in all_rows} == {"AUTO_MSL_S1_cement", "AUTO_MSL_S2_sand"}
    assert len(s2_rows) == 1
    assert s2_rows[0].amount == Decimal("300.00")
    assert s2_rows[0].payment_details == "Alpha Traders"
    assert s2_rows[0].site.site_name == "Canal Lining"


def test_labour_projection_totals_payments_per_contractor(db, make_site):
    make_site("S1")
    contractor = LabourContractor(name="Ramesh Labour Co")
    db.add(contractor)
    db.commit()
    for day, amount in ((2, "5000"), (9, "7500")):
        db.add(LabourPayment(
            contractor_id=contractor.id,
            site_id="S1",
            payment_date=datetime(2024, 3, day),
            amount=Decimal(amount),
        ))
    db.commit()

    rows = get_auto_labour_expenses(db, "S1")

    assert len(rows) == 1
    assert rows[0].id == f"AUTO_LAB_S1_{contractor.id}"
    assert rows[0].amount == Decimal("12500.00")
    assert rows[0].expense_date == datetime(2024, 3, 9)
    assert rows[0].payment_details == "Ramesh Labour Co"
    assert rows[0].is_auto is True
