"""Example: drive the service layer directly (no Flask).

Controllers are thin; the payment rules live in the services.
"""

import importlib

from config import get_settings_module

from src.dojo_portal.dojo_portal.container import build_container


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, secret_key=settings.SECRET_KEY)

    issued = container.session_service.issue("student", "student123")
    principal = container.gate.require_role(issued.token)
    payment_id = container.payment_service.create_payment(
        principal=principal,
        data={"type": "monthly", "amount": "100", "transactionId": "DEMO-TX-1"},
    )
    print(payment_id, container.payment_service.list_my_payments(principal=principal))


if __name__ == "__main__":
    main()
