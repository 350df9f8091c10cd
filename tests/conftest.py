"""Test fixtures for API and service tests."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool
import sys
from pathlib import Path
import os


def ensure_src_on_path() -> None:
    root = Path(__file__).resolve().parent.parent
    src_path = root / "src"
    if str(src_path) not in sys.path:
        sys.path.append(str(src_path))


ensure_src_on_path()

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

from api.routers import conversations, mentions, metrics
from models import Base, Company, Product, get_db
from models.database import apply_sqlite_pragmas


@pytest.fixture(scope="function")
def db_engine():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def fk_engine():
    """In-memory engine configured like production SQLite, foreign keys enforced."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(engine, "connect", apply_sqlite_pragmas)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def committing_session(fk_engine):
    """Session bound to the engine, like ``SessionLocal``; commits and rollbacks are real."""
    session = sessionmaker(autocommit=False, autoflush=False, bind=fk_engine)()
    yield session
    session.close()


@pytest.fixture(scope="function")
def db_session(db_engine):
    connection = db_engine.connect()
    transaction = connection.begin()
    session = Session(bind=connection)

    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture(scope="function")
def test_app():
    @asynccontextmanager
    async def test_lifespan(app: FastAPI) -> AsyncGenerator:
        yield

    app = FastAPI(
        title="ProductCite Test",
        description="Detect catalog products mentioned in sales conversations",
        version="0.1.0",
        lifespan=test_lifespan,
    )

    app.include_router(conversations.router, prefix="/api/v1/conversations", tags=["conversations"])
    app.include_router(mentions.router, prefix="/api/v1/mentions", tags=["mentions"])
    app.include_router(metrics.router, prefix="/api/v1/metrics", tags=["metrics"])

    @app.get("/")
    async def root():
        return {
            "name": "ProductCite",
            "version": "0.1.0",
            "status": "running",
        }

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    return app


@pytest.fixture(scope="function")
def client(db_session: Session, test_app: FastAPI):
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    test_app.dependency_overrides[get_db] = override_get_db
    with TestClient(test_app) as test_client:
        yield test_client
    test_app.dependency_overrides.clear()


@pytest.fixture
def company(db_session: Session) -> Company:
    company = Company(id="company-1", name="Casa do Molho")
    db_session.add(company)
    db_session.flush()
    return company


@pytest.fixture
def catalog(db_session: Session, company: Company) -> dict[str, Product]:
    products = {
        "molho": Product(id="prod-molho", company_id=company.id, name="Produto A - Molho Especial", sku_code="A-002"),
        "tempero": Product(
            id="prod-tempero",
            company_id=company.id,
            name="Tempero Baiano Picante",
            ean_code="7891234567895",
        ),
        "farofa": Product(id="prod-farofa", company_id=company.id, name="Farofa Pronta Temperada", sku_code="F1"),
    }
    db_session.add_all(products.values())
    db_session.flush()
    return products
