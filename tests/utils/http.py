ADMIN_HEADERS = {"X-Admin-API-Key": "test-admin-key-12345"}


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
