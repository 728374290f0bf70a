"""Unit tests that do not require a running API or external services."""
from app.config import settings
from app.database import to_async_url


def test_settings_load():
    assert settings.API_V1_PREFIX == "/api/v1"
    assert settings.invoices_route == "/api/v1/invoices"
    assert settings.INVOICES_PAGE_SIZE > 0


def test_environment_flag():
    """Environment flags reflect ENVIRONMENT value."""
    assert settings.is_development == (settings.ENVIRONMENT.lower() == "development")
    assert settings.is_production == (settings.ENVIRONMENT.lower() == "production")


def test_origins_parsed_to_list():
    assert isinstance(settings.ALLOWED_ORIGINS, list)
    assert all(origin == origin.strip() for origin in settings.ALLOWED_ORIGINS)


def test_async_url_plain():
    url, connect_args = to_async_url("postgresql://u:p@db:5432/invoices")
    assert url == "postgresql+asyncpg://u:p@db:5432/invoices"
    assert connect_args == {}


def test_async_url_moves_sslmode_to_connect_args():
    url, connect_args = to_async_url("postgres://u:p@db/invoices?sslmode=require")
    assert url == "postgresql+asyncpg://u:p@db/invoices"
    assert "ssl" in connect_args


def test_async_url_keeps_other_query_params():
    url, _ = to_async_url("postgresql://u:p@db/invoices?sslmode=require&application_name=web")
    assert url == "postgresql+asyncpg://u:p@db/invoices?application_name=web"

    url, _ = to_async_url("postgresql://u:p@db/invoices?application_name=web&sslmode=disable")
    assert url == "postgresql+asyncpg://u:p@db/invoices?application_name=web"
