"""
Pytest configuration and shared fixtures.

Each test gets a fresh in-memory SQLite database wired into the app through
the get_db dependency.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from jobboard import models
from jobboard.database import Base, get_db
from jobboard.main import app


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _fk_on(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_company(db):
    def _make(name="Acme", **fields):
        company = models.Company(name=name, **fields)
        db.add(company)
        db.commit()
        db.refresh(company)
        return company
    return _make


@pytest.fixture
def make_hiring_manager(db):
    counter = {"n": 0}

    def _make(name="Sarah", companies=(), email=None, **fields):
        counter["n"] += 1
        hm = models.HiringManager(
            name=name,
            email=email or f"hm{counter['n']}@acme.io",
            companies=list(companies),
            **fields,
        )
        db.add(hm)
        db.commit()
        db.refresh(hm)
        return hm
    return _make


@pytest.fixture
def make_candidate(db):
    counter = {"n": 0}

    def _make(name="Alex", email=None, **fields):
        counter["n"] += 1
        candidate = models.Candidate(
            name=name, email=email or f"candidate{counter['n']}@mailbox.org", **fields
        )
        db.add(candidate)
        db.commit()
        db.refresh(candidate)
        return candidate
    return _make


@pytest.fixture
def make_role(db):
    def _make(company, hiring_manager, title="Engineer", status="published", **fields):
        values = dict(
            description="Build and ship the product with the team.",
            location="San Francisco, CA",
            location_type="hybrid",
            employment_type="full-time",
            salary_min=100000,
            salary_max=150000,
        )
        values.update(fields)
        role = models.Role(
            title=title,
            status=status,
            company_id=company.id,
            hiring_manager_id=hiring_manager.id,
            **values,
        )
        db.add(role)
        db.commit()
        db.refresh(role)
        return role
    return _make


@pytest.fixture
def make_application(db):
    def _make(role, candidate, status="new", cover_note=None):
        application = models.Application(
            role_id=role.id, candidate_id=candidate.id, status=status, cover_note=cover_note
        )
        db.add(application)
        db.commit()
        db.refresh(application)
        return application
    return _make


@pytest.fixture
def hiring_setup(make_company, make_hiring_manager, make_candidate, make_role):
    """Acme with Sarah as its hiring manager, a published role and a candidate."""
    company = make_company("Acme")
    sarah = make_hiring_manager("Sarah", companies=[company])
    role = make_role(company, sarah, "Engineer")
    alex = make_candidate("Alex")
    return {"company": company, "hiring_manager": sarah, "role": role, "candidate": alex}
