"""
Pytest configuration and fixtures
"""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from cmdb.database import Base, create_db_engine, get_db
from cmdb.services import CIService, RelationshipService, SchemaKind, SchemaService
from cmdb.utils.config import Config, DatabaseConfig
from cmdb.validation import AttributeDefinition, SchemaValidator, TypeSchema


# ============================================
# DATABASE
# ============================================

@pytest.fixture
def engine():
    """Fresh in-memory SQLite database per test"""
    engine = create_db_engine(DatabaseConfig(url="sqlite://"))
    Base.metadata.create_all(bind=engine)

    yield engine

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(engine):
    """Provide a database session for tests"""
    SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    session = SessionLocal()

    try:
        yield session
    finally:
        session.close()


# ============================================
# SCHEMAS
# ============================================

@pytest.fixture
def server_schema():
    """The CI-type schema used throughout the validation scenarios"""
    return TypeSchema(
        name="server",
        attributes=[
            AttributeDefinition(name="ip_address", type="string", required=True, validation={"format": "ipv4"}),
            AttributeDefinition(name="cpu_cores", type="number", required=True, validation={"min": 1}),
        ],
    )


@pytest.fixture
def depends_on_schema():
    return TypeSchema(
        name="depends_on",
        attributes=[
            AttributeDefinition(name="dependency_type", type="string", default="runtime"),
            AttributeDefinition(name="is_critical", type="boolean"),
        ],
    )


# ============================================
# SERVICES
# ============================================

@pytest.fixture
def validator():
    return SchemaValidator()


@pytest.fixture
def schema_service(db_session, validator):
    return SchemaService(db_session, validator)


@pytest.fixture
def ci_service(db_session, validator, schema_service):
    return CIService(db_session, validator, schema_service)


@pytest.fixture
def relationship_service(db_session, validator, schema_service):
    return RelationshipService(db_session, validator, schema_service)


@pytest.fixture
def stored_schemas(schema_service, server_schema, depends_on_schema):
    """Active 'server' CI type and 'depends_on' relationship type"""
    return {
        "server": schema_service.create(SchemaKind.CI_TYPE, server_schema),
        "depends_on": schema_service.create(SchemaKind.RELATIONSHIP_TYPE, depends_on_schema),
    }


@pytest.fixture
def make_ci(ci_service, stored_schemas):
    """Factory for valid 'server' CIs"""
    counter = {"n": 0}

    def _make(name=None, **attributes):
        counter["n"] += 1
        payload = {"ip_address": f"10.0.0.{counter['n']}", "cpu_cores": 2}
        payload.update(attributes)
        ci, _ = ci_service.create({"name": name or f"server-{counter['n']}", "type": "server", "attributes": payload})
        return ci

    return _make


# ============================================
# HTTP
# ============================================

@pytest.fixture
def app(db_session):
    """Application wired to the test session"""
    from api.main import create_app

    application = create_app(Config())

    def override_get_db():
        yield db_session

    application.dependency_overrides[get_db] = override_get_db
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
def client(app):
    return TestClient(app)
