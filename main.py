"""
Service entry point.

Loads .env, fetches connection URLs from Vault, and serves the API with
uvicorn.
"""

import logging
import os

import uvicorn
from dotenv import load_dotenv

from api.app import build_services, create_app
from auth.config import AuthConfig
from auth.session import SessionManager
from clients.postgres_client import PostgresClient
from clients.valkey_client import ValkeyClient
from clients.vault_client import get_database_url, get_valkey_url


def main() -> None:
    load_dotenv()
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = AuthConfig.from_env()
    postgres = PostgresClient(get_database_url())
    valkey = ValkeyClient(get_valkey_url())
    session_manager = SessionManager(valkey, config)

    app = create_app(build_services(postgres), session_manager, postgres, config.session_cookie_name)

    try:
        uvicorn.run(app, host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", "8000")))
    finally:
        valkey.close()
        PostgresClient.close_all_pools()


if __name__ == "__main__":
    main()
