import sys
import os
import argparse
import logging
from dotenv import load_dotenv

load_dotenv()

# Add the parent directory to sys.path to allow imports from backend
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from database import SessionLocal
from crud.ledger_account import initialize_default_ledgers
from models.ledger_account import LedgerAccount
from utils.exceptions import AccountingError

# Setup logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger("init_ledgers")


def init_ledgers(tenant_ids=None, user_id="system"):
    db = SessionLocal()
    try:
        if not tenant_ids:
            # Every tenant that already has at least one ledger
            tenant_ids = sorted(t for (t,) in db.query(LedgerAccount.tenant_id).distinct() if t)

        logger.info(f"Seeding default ledgers for tenants: {tenant_ids}")
        for tenant_id in tenant_ids:
            created = initialize_default_ledgers(db, tenant_id, user_id=user_id)
            if created:
                logger.info(f"Tenant {tenant_id}: created {[ledger.name for ledger in created]}")
            else:
                logger.info(f"Tenant {tenant_id}: default ledgers already present")
    except AccountingError as e:
        logger.error(f"Seeding failed: {e.message} {e.details}")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create the default ledgers (Cash, Bank, Sales, Purchase, Profit & Loss A/c) per tenant.")
    parser.add_argument("tenant_ids", nargs="*", help="Tenants to seed. Defaults to every tenant with ledgers.")
    parser.add_argument("--user", default="system", help="Actor recorded in the audit log.")
    args = parser.parse_args()
    init_ledgers(args.tenant_ids, user_id=args.user)
