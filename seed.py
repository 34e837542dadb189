from site_erp.core.database import Base, SessionLocal, engine
from site_erp.models import (
    AuditLog,
    LabourContract,
    LabourContractor,
    LabourPayment,
    Ledger,
    LedgerType,
    MaterialSupplierLedger,
    PaymentMode,
    Site,
    SiteExpense,
    SiteStatus,
    SiteTransaction,
    TxnNature,
    TxnSource,
)
from site_erp.services.site_expense_service import create_site_expense

from faker import Faker
from decimal import Decimal
import random
from datetime import datetime, timedelta

fake = Faker("en_IN")

MATERIALS = ["Cement", "Sand", "Aggregate 20mm", "Aggregate 10mm", "Steel TMT", "Bricks", "Bitumen"]
DEPARTMENTS = ["PWD", "PMGSY", "Water Resources", "Municipal Corporation"]


def random_date(days_back: int = 120) -> datetime:
    return datetime.utcnow() - timedelta(days=random.randint(0, days_back), hours=random.randint(0, 23))


db = SessionLocal()

try:
    Base.metadata.create_all(bind=engine)

    print("🔄 Clearing existing data...")
    for model in (
        AuditLog, LabourPayment, LabourContract, LabourContractor, MaterialSupplierLedger,
        SiteTransaction, SiteExpense, Ledger, Site,
    ):
        db.query(model).delete()
    db.commit()
    print("✅ Data cleared.")

    print("🔄 Creating sites and ledgers...")
    sites = []
    for _ in range(random.randint(4, 6)):
        sites.append(Site(
            site_name=f"{fake.city()} {random.choice(['Road', 'Bridge', 'Canal', 'School Building'])}",
            tender_no=f"TND/{random.randint(2023, 2026)}/{random.randint(100, 999)}",
            sd_amount=Decimal(random.randint(50, 500) * 1000),
            department=random.choice(DEPARTMENTS),
            status=random.choice(list(SiteStatus)),
        ))

    suppliers = []
    for _ in range(random.randint(5, 8)):
        suppliers.append(Ledger(
            name=fake.company(),
            ledger_type=LedgerType.MATERIAL_SUPPLIER,
            mobile=''.join(filter(str.isdigit, fake.phone_number()))[:10],
            address=fake.address().replace('\n', ', '),
        ))

    db.add_all(sites + suppliers)
    db.commit()
    print(f"✅ Seeded {len(sites)} sites")
    print(f"✅ Seeded {len(suppliers)} supplier ledgers")

    print("🔄 Creating material deliveries...")
    rows = []
    for _ in range(60):
        qty = Decimal(random.randint(5, 80))
        rate = Decimal(random.randint(200, 6500))
        with_total = random.choice([True, False])
        rows.append(MaterialSupplierLedger(
            ledger_id=random.choice(suppliers).id,
            site_id=random.choice(sites).id,
            entry_date=random_date(),
            receipt_no=str(random.randint(10000, 99999)),
            vehicle_no=f"MP{random.randint(10, 99)}{fake.random_uppercase_letter()}{random.randint(1000, 9999)}",
            material=random.choice(MATERIALS),
            qty=qty,
            rate=rate,
            total_amt=(qty * rate * Decimal("1.18")).quantize(Decimal("0.01")) if with_total else None,
        ))
    db.add_all(rows)
    db.commit()
    print(f"✅ Seeded {len(rows)} material ledger rows")

    print("🔄 Creating labour contracts and payments...")
    payments = 0
    for _ in range(3):
        contractor = LabourContractor(name=fake.name(), mobile=fake.msisdn()[:10])
        db.add(contractor)
        db.flush()
        for site in random.sample(sites, 2):
            contract = LabourContract(
                contractor_id=contractor.id,
                site_id=site.id,
                agreed_amount=Decimal(random.randint(100, 900) * 1000),
                start_date=random_date(),
            )
            db.add(contract)
            db.flush()
            for _ in range(random.randint(2, 6)):
                db.add(LabourPayment(
                    contractor_id=contractor.id,
                    site_id=site.id,
                    contract_id=contract.id,
                    payment_date=random_date(),
                    amount=Decimal(random.randint(5, 50) * 1000),
                    mode=random.choice(list(PaymentMode)),
                ))
                payments += 1
    db.commit()
    print(f"✅ Seeded {payments} labour payments")

    print("🔄 Creating manual expenses and receipts...")
    expenses = 0
    for site in sites:
        for _ in range(random.randint(3, 8)):
            create_site_expense(db, {
                "site_id": site.id,
                "expense_date": random_date().isoformat(),
                "expense_title": random.choice(["Diesel", "Site Office Rent", "Machine Repair", "Tea & Snacks"]),
                "expense_summary": fake.sentence(nb_words=6),
                "payment_details": random.choice(["Cash", "UPI", "Bank transfer"]),
                "amount": random.randint(500, 40000),
            }, user_id="SEED")
            expenses += 1

        db.add(SiteTransaction(
            site_id=site.id,
            txn_date=random_date(),
            source=TxnSource.SITE_RECEIPT,
            source_id=f"RCPT-{site.id}",
            nature=TxnNature.CREDIT,
            amount=Decimal(random.randint(5, 30) * 100000),
            title="Running bill payment",
        ))
    db.commit()
    print(f"✅ Seeded {expenses} site expenses (with transaction mirrors)")
    print("🎉 All data seeded successfully!")

except Exception as e:
    db.rollback()
    print(f"❌ SEEDING FAILED: {e}")
finally:
    db.close()
