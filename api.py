import argparse

import uvicorn
from sqlalchemy import create_engine
from sqlmodel import SQLModel

import src.domain  # noqa: F401  registers tables on SQLModel.metadata
from config import ApplicationConfig
from src.api.app import create_app

app = create_app(ApplicationConfig)


def init_db():
    """Create missing tables using the synchronous migration URI"""
    engine = create_engine(ApplicationConfig.MIGRATION_DB_URI)
    SQLModel.metadata.create_all(engine)
    engine.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Dairy Subscription Service API")
    parser.add_argument(
        "--init-db", action="store_true", help="Create database tables and exit"
    )
    parser.add_argument(
        "--no-reload", action="store_true", help="Disable auto-reload"
    )
    args = parser.parse_args()

    if args.init_db:
        init_db()
    else:
        uvicorn.run(
            "api:app",
            host=ApplicationConfig.API_HOST,
            port=ApplicationConfig.API_PORT,
            reload=not args.no_reload,
            log_level=ApplicationConfig.LOG_LEVEL.lower(),
        )
