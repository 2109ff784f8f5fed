"""
Dependency Injection Container.

Configura e gerencia todas as dependências da aplicação.
Usa dependency-injector para lazy-loading e injeção automática.

Padrões:
- Singleton: Uma instância para toda app (repositories, tabela de frete)
- Factory: Nova instância por chamada (services, UoW)
- Configuration: settings.SHIPPING + EVENT_PUBLISHER_MODE

Imports dos adapters são tardios (dentro das factories) para que o
container possa ser importado antes do Django estar configurado.
"""

from decimal import Decimal
from typing import Any, Callable, Dict, Optional

from dependency_injector import containers, providers


USE_CASES = 'src.core.shipping.use_cases'
REPOSITORIES = 'src.adapters.django_app.shipping.repositories'

DEFAULT_CONFIG: Dict[str, Any] = {
    'origin_cep': '01310100',
    'use_external_api': False,
    'melhor_envio_token': '',
    'melhor_envio_sandbox': True,
    'api_timeout': 10.0,
    'min_price': '15.00',
    'serve_unknown_regions': True,
    'default_profile': {
        'weight_kg': '0.5',
        'width_cm': 20,
        'height_cm': 10,
        'length_cm': 30,
    },
    'event_publisher_mode': 'sync',
}


def _lazy(module: str, name: str) -> Callable[..., Any]:
    """Factory que importa `module.name` só no momento da criação."""
    def factory(**kwargs):
        return getattr(__import__(module, fromlist=[name]), name)(**kwargs)
    factory.__name__ = name
    return factory


# =============================================================================
# Builders
# =============================================================================

def build_regional_rate_table(shipping: Dict[str, Any]):
    from src.core.shipping.rate_tables import RegionalRateTable, TARIFA_PADRAO

    return RegionalRateTable(
        tarifa_padrao=TARIFA_PADRAO if shipping.get('serve_unknown_regions', True) else None,
        preco_minimo=Decimal(str(shipping.get('min_price') or '15.00')),
    )


def build_rate_table(shipping: Dict[str, Any]):
    """
    Tabela regional, ou Melhor Envio com fallback regional quando
    a API externa estiver habilitada e houver token.
    """
    regional = build_regional_rate_table(shipping)

    if not (shipping.get('use_external_api') and shipping.get('melhor_envio_token')):
        return regional

    from src.core.shipping.rate_tables import FallbackRateTable
    from src.adapters.django_app.shipping.melhor_envio import (
        MELHOR_ENVIO_PRODUCAO_URL,
        MELHOR_ENVIO_SANDBOX_URL,
        MelhorEnvioRateTable,
    )

    url = shipping.get('melhor_envio_url') or (
        MELHOR_ENVIO_SANDBOX_URL if shipping.get('melhor_envio_sandbox', True)
        else MELHOR_ENVIO_PRODUCAO_URL
    )
    externa = MelhorEnvioRateTable(
        token=shipping['melhor_envio_token'],
        origem_cep=shipping.get('origin_cep') or DEFAULT_CONFIG['origin_cep'],
        url=url,
        timeout=float(shipping.get('api_timeout') or 10),
    )
    return FallbackRateTable(primaria=externa, reserva=regional)


def build_pacote_padrao(profile: Optional[Dict[str, Any]]):
    from src.core.shipping.entities import Pacote

    profile = profile or DEFAULT_CONFIG['default_profile']
    return Pacote(
        peso_kg=Decimal(str(profile['weight_kg'])),
        largura_cm=int(profile['width_cm']),
        altura_cm=int(profile['height_cm']),
        comprimento_cm=int(profile['length_cm']),
    )


def build_event_publisher(mode: Optional[str]):
    from src.adapters.django_app.events.publishers import get_event_publisher

    return get_event_publisher(use_celery=(mode == 'celery'))


class Container(containers.DeclarativeContainer):
    """
    Container principal de Dependency Injection.

    Organização:
    - Configuration: settings.SHIPPING
    - Infrastructure: Event publisher/store, tabela de frete
    - Repositories: Perfis, produtos, planos
    - Unit of Work: Transações
    - Services: Use Cases

    Example:
        container = get_container()
        service = container.calcular_frete_service()
        output = service.execute(input_dto, is_admin=False)
    """

    # =========================================================================
    # Configuration
    # =========================================================================

    config = providers.Configuration(default=DEFAULT_CONFIG)

    # =========================================================================
    # Infrastructure
    # =========================================================================

    event_publisher = providers.Singleton(
        build_event_publisher,
        mode=config.event_publisher_mode,
    )

    event_store = providers.Singleton(_lazy(REPOSITORIES, 'DjangoEventStore'))

    rate_table = providers.Singleton(build_rate_table, shipping=config)

    pacote_padrao = providers.Singleton(build_pacote_padrao, profile=config.default_profile)

    # =========================================================================
    # Repositories (Singleton - uma instância por app)
    # =========================================================================

    shipping_profile_repository = providers.Singleton(
        _lazy(REPOSITORIES, 'DjangoShippingProfileRepository')
    )

    product_lookup = providers.Singleton(_lazy(REPOSITORIES, 'DjangoProductShippingLookup'))

    plan_lookup = providers.Singleton(_lazy(REPOSITORIES, 'DjangoPlanShippingLookup'))

    # =========================================================================
    # Unit of Work (Factory - nova instância por operação)
    # =========================================================================

    unit_of_work = providers.Factory(
        _lazy('src.adapters.django_app.shared.unit_of_work', 'DjangoUnitOfWork'),
        event_publisher=event_publisher,
        event_store=event_store,
    )

    # =========================================================================
    # Services / Use Cases - Cotação (sem UoW - leitura)
    # =========================================================================

    calcular_frete_service = providers.Factory(
        _lazy(USE_CASES, 'CalcularFreteService'),
        profile_repo=shipping_profile_repository,
        product_lookup=product_lookup,
        plan_lookup=plan_lookup,
        rate_table=rate_table,
        pacote_padrao=pacote_padrao,
    )

    selecionar_frete_service = providers.Factory(
        _lazy(USE_CASES, 'SelecionarFreteService'),
        calcular_service=calcular_frete_service,
        origem_cep=config.origin_cep,
    )

    verificar_disponibilidade_service = providers.Factory(
        _lazy(USE_CASES, 'VerificarDisponibilidadeService'),
        product_lookup=product_lookup,
        plan_lookup=plan_lookup,
    )

    # =========================================================================
    # Services / Use Cases - Perfis de Frete
    # =========================================================================

    listar_perfis_frete_service = providers.Factory(
        _lazy(USE_CASES, 'ListarPerfisFreteService'),
        profile_repo=shipping_profile_repository,
    )

    obter_perfil_frete_service = providers.Factory(
        _lazy(USE_CASES, 'ObterPerfilFreteService'),
        profile_repo=shipping_profile_repository,
    )

    criar_perfil_frete_service = providers.Factory(
        _lazy(USE_CASES, 'CriarPerfilFreteService'),
        profile_repo=shipping_profile_repository,
        uow=unit_of_work,
    )

    atualizar_perfil_frete_service = providers.Factory(
        _lazy(USE_CASES, 'AtualizarPerfilFreteService'),
        profile_repo=shipping_profile_repository,
        uow=unit_of_work,
    )

    alternar_status_perfil_frete_service = providers.Factory(
        _lazy(USE_CASES, 'AlternarStatusPerfilFreteService'),
        profile_repo=shipping_profile_repository,
        uow=unit_of_work,
    )

    excluir_perfil_frete_service = providers.Factory(
        _lazy(USE_CASES, 'ExcluirPerfilFreteService'),
        profile_repo=shipping_profile_repository,
        uow=unit_of_work,
    )


# =============================================================================
# Container Global (Singleton)
# =============================================================================

_container: Optional[Container] = None


def _load_settings(container: Container) -> None:
    """Carrega settings.SHIPPING e EVENT_PUBLISHER_MODE, se o Django estiver configurado."""
    from django.conf import settings

    if not settings.configured:
        return

    container.config.from_dict(dict(getattr(settings, 'SHIPPING', {})))
    container.config.event_publisher_mode.from_value(
        getattr(settings, 'EVENT_PUBLISHER_MODE', 'sync')
    )


def get_container() -> Container:
    """
    Retorna instância global do container.

    Cria se não existir (lazy initialization).
    """
    global _container

    if _container is None:
        _container = Container()
        _load_settings(_container)

    return _container


def reset_container() -> None:
    """
    Reset do container (para testes).

    Permite criar novo container limpo.
    """
    global _container
    _container = None


# =============================================================================
# Testing Container
# =============================================================================

def create_testing_container(config: Optional[Dict[str, Any]] = None) -> Container:
    """
    Container para testes com implementações InMemory.

    Mesmos services do Container principal; apenas repositórios,
    UoW e publisher são trocados.

    Example:
        container = create_testing_container()
        container.product_lookup().add(ItemFrete(id="p1", perfil=perfil))
        output = container.calcular_frete_service().execute(dto)
    """
    from src.core.shipping.ports import (
        InMemoryPlanShippingLookup,
        InMemoryProductShippingLookup,
        InMemoryShippingProfileRepository,
    )
    from src.adapters.django_app.events.publishers import InMemoryEventPublisher
    from src.adapters.django_app.shared.unit_of_work import InMemoryUnitOfWork

    container = Container()
    if config:
        container.config.from_dict(config)

    container.event_publisher.override(providers.Singleton(InMemoryEventPublisher))
    container.product_lookup.override(providers.Singleton(InMemoryProductShippingLookup))
    container.plan_lookup.override(providers.Singleton(InMemoryPlanShippingLookup))
    container.shipping_profile_repository.override(
        providers.Singleton(
            InMemoryShippingProfileRepository,
            produtos=container.product_lookup,
            planos=container.plan_lookup,
        )
    )
    container.unit_of_work.override(
        providers.Factory(InMemoryUnitOfWork, event_publisher=container.event_publisher)
    )

    return container
