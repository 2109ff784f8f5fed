"""
Configurações globais do Pytest para o módulo de frete.

Este arquivo é carregado automaticamente pelo pytest e
fornece fixtures e configurações compartilhadas.
"""

import pytest
from pathlib import Path


TEST_SHIPPING = {
    'origin_cep': '01310100',
    'use_external_api': False,
    'melhor_envio_token': '',
    'melhor_envio_sandbox': True,
    'api_timeout': 5.0,
    'min_price': '15.00',
    'serve_unknown_regions': True,
    'default_profile': {
        'weight_kg': '0.5',
        'width_cm': 20,
        'height_cm': 10,
        'length_cm': 30,
    },
}


@pytest.fixture(scope="session")
def project_root():
    """Retorna o caminho raiz do projeto."""
    return Path(__file__).parent.parent


@pytest.fixture(autouse=True)
def reset_singletons():
    """
    Reset do container DI entre testes.

    Garante que cada teste inicia com estado limpo.
    """
    from src.config.container import reset_container

    reset_container()
    yield
    reset_container()


def pytest_configure(config):
    """Configura Django e marcadores antes dos testes."""
    import django
    from django.conf import settings

    if not settings.configured:
        settings.configure(
            DEBUG=True,
            SECRET_KEY='test-secret-key',
            DATABASES={
                'default': {
                    'ENGINE': 'django.db.backends.sqlite3',
                    'NAME': ':memory:',
                }
            },
            INSTALLED_APPS=[
                'django.contrib.contenttypes',
                'django.contrib.auth',
                'src.adapters.django_app.shipping',
            ],
            ROOT_URLCONF='src.adapters.django_app.shipping.urls',
            DEFAULT_AUTO_FIELD='django.db.models.BigAutoField',
            USE_TZ=True,
            TIME_ZONE='America/Sao_Paulo',
            SHIPPING=TEST_SHIPPING,
            EVENT_PUBLISHER_MODE='sync',
        )
        django.setup()

    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )


def pytest_collection_modifyitems(config, items):
    """Pula testes marcados como integration sem --run-integration."""
    skip_integration = pytest.mark.skip(reason="Integration tests require --run-integration")

    for item in items:
        if item.get_closest_marker("integration") is None:
            continue
        if not config.getoption("--run-integration", default=False):
            item.add_marker(skip_integration)


def pytest_addoption(parser):
    """Adiciona opções de linha de comando."""
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="run integration tests",
    )
