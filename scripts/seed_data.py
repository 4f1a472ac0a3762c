from __future__ import annotations

import argparse

from services.orders.app.db.database import db_session
from services.orders.app.db.init_db import init_db
from services.orders.app.db.models import Store, User


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed minimal marketplace data")
    parser.add_argument("--customer-id", default="c-1")
    parser.add_argument("--customer-email", default="customer@example.com")
    parser.add_argument("--seller-1", default="s-1")
    parser.add_argument("--seller-2", default="s-2")
    parser.add_argument("--admin-id", default="a-1")
    args = parser.parse_args()

    init_db()

    db = db_session()
    try:
        users = (
            (args.customer_id, "customer", args.customer_email, "customer"),
            (args.seller_1, "seller one", "seller1@example.com", "seller"),
            (args.seller_2, "seller two", "seller2@example.com", "seller"),
            (args.admin_id, "admin", "admin@example.com", "admin"),
        )
        for uid, username, email, role in users:
            if db.get(User, uid) is None:
                db.add(User(id=uid, username=username, email=email, role=role))

        db.flush()

        customer = db.get(User, args.customer_id)
        if customer is not None and not customer.customer_region:
            customer.customer_region = "Central"
            customer.customer_street_address = "1 Market Street"
            customer.customer_floor = "2"
            customer.customer_doorbell = "Customer"
            customer.customer_mobile_phone = "+10000000000"

        # One store per seller
        for store_id, name, owner_id in (
            ("store-a", "Corner Books", args.seller_1),
            ("store-b", "Harbor Books", args.seller_2),
        ):
            if db.get(Store, store_id) is None:
                db.add(Store(id=store_id, store_name=name, owner_id=owner_id))

        db.commit()
        print(f"Seeded customer={args.customer_id} stores=store-a,store-b")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    raise SystemExit(main())
