"""
Testes para o módulo de settings (sem ativar o Django).

Coverage:
- DATABASE_URL: sqlite, postgres e variáveis DATABASE_*
- Apps instaladas: apenas Django + app de frete
"""

import pytest

from src.config import settings as project_settings


class TestDatabaseFromEnv:

    def test_sqlite_url(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "sqlite:///dev.sqlite3")

        db = project_settings._database_from_env()

        assert db["ENGINE"] == "django.db.backends.sqlite3"
        assert db["NAME"] == project_settings.BASE_DIR / "dev.sqlite3"

    def test_postgres_url(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "postgresql://loja:segredo@db:5433/frete")

        db = project_settings._database_from_env()

        assert db["ENGINE"] == "django.db.backends.postgresql"
        assert (db["USER"], db["PASSWORD"], db["HOST"], db["PORT"], db["NAME"]) == (
            "loja", "segredo", "db", "5433", "frete",
        )

    def test_variaveis_individuais(self, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)
        monkeypatch.setenv("DATABASE_HOST", "pg.interno")
        monkeypatch.setenv("DATABASE_NAME", "loja_db")

        db = project_settings._database_from_env()

        assert db["HOST"] == "pg.interno"
        assert db["NAME"] == "loja_db"

    def test_url_nao_suportada(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "mysql://u:p@h:3306/x")

        with pytest.raises(ValueError):
            project_settings._database_from_env()


def test_apps_instaladas_sem_sobras():
    assert project_settings.INSTALLED_APPS[-1] == "src.adapters.django_app.shipping"
    assert not hasattr(project_settings, "THIRD_PARTY_APPS")
    assert all(app.startswith(("django.contrib.", "src.")) for app in project_settings.INSTALLED_APPS)
