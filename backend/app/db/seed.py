from __future__ import annotations

import logging

from sqlalchemy import select

from backend.app.config import settings
from backend.app.db.session import SessionLocal, unit_of_work
from backend.app.db.models.models_v1 import AccessGrant, User, UserRole, Warehouse
from backend.app.db.models.core_types import Role

logger = logging.getLogger(__name__)

# role -> path prefixes only that role (or admin) may reach
DEFAULT_GRANTS: dict[Role, list[str]] = {
    Role.purchasing: ["/v1/purchase-orders", "/v1/line-items"],
    Role.stock_movement: ["/v1/stock", "/v1/lots"],
    Role.warehouse_validation: ["/v1/products/reorder", "/v1/products/low-stock"],
    Role.admin: ["/v1/users", "/v1/access-grants"],
}

DEFAULT_USERS: list[tuple[str, str, Role]] = [
    ("admin", "Administrator", Role.admin),
    ("purchasing", "Purchasing", Role.purchasing),
    ("stock", "Stock movement", Role.stock_movement),
    ("warehouse", "Warehouse validation", Role.warehouse_validation),
]


def run_seed():
    if not settings.seed_password:
        raise SystemExit("SEED_PASSWORD must be set to seed the default users")

    db = SessionLocal()
    try:
        with unit_of_work(db):
            if not db.scalar(select(Warehouse).where(Warehouse.name == "Main")):
                db.add(Warehouse(name="Main"))

            for role, prefixes in DEFAULT_GRANTS.items():
                for prefix in prefixes:
                    exists = db.scalar(
                        select(AccessGrant).where(AccessGrant.role == role).where(AccessGrant.path_prefix == prefix)
                    )
                    if not exists:
                        db.add(AccessGrant(role=role, path_prefix=prefix))

            for login, full_name, role in DEFAULT_USERS:
                if db.scalar(select(User).where(User.login == login)):
                    continue
                user = User(login=login, full_name=full_name, active=True)
                user.set_password(settings.seed_password)
                user.roles.append(UserRole(role=role))
                db.add(user)

        logger.info("Seed done: %s users, %s grant prefixes", len(DEFAULT_USERS), sum(map(len, DEFAULT_GRANTS.values())))
        print("SEED OK: users=" + ", ".join(login for login, _, _ in DEFAULT_USERS))
    finally:
        db.close()


if __name__ == "__main__":
    logging.basicConfig(level=settings.log_level)
    run_seed()
