"""
Domínio de Frete - Cotação para o checkout.

Este módulo contém toda a lógica de negócio relacionada ao cálculo
de frete da loja, incluindo:
- Entidades (Cep, Pacote, ShippingProfileEntity, ShippingOption)
- Tabelas de frete (RegionalRateTable, FallbackRateTable)
- Use Cases (CalcularFrete, SelecionarFrete, CRUD de perfis)
- Domain Events (PerfilFreteCriado, PerfilFreteStatusAlterado, ...)
- DTOs (Input/Output Data Transfer Objects)
- Ports (Interfaces para repositórios e tabelas de frete)

Características do Domínio:
- CEP validado e mapeado para UF por faixa numérica
- Peso tarifável = max(peso real, peso cúbico)
- Opções ordenadas por preço, depois prazo
- Frete grátis exclusivo para administradores
"""

from .entities import (
    Cep,
    Pacote,
    ItemFrete,
    ShippingProfileEntity,
    ShippingOption,
    OrderShippingData,
    PerfilCargoSource,
    ProdutosCargoSource,
    PlanoCargoSource,
)
from .rate_tables import RegionalRateTable, FallbackRateTable, TarifaRegional
from .events import (
    PerfilFreteCriadoEvent,
    PerfilFreteAtualizadoEvent,
    PerfilFreteStatusAlteradoEvent,
    PerfilFreteExcluidoEvent,
)
from .dtos import (
    CotarFreteInputDTO,
    SelecionarFreteInputDTO,
    VerificarDisponibilidadeInputDTO,
    CriarPerfilFreteInputDTO,
    AtualizarPerfilFreteInputDTO,
    CotacaoFreteOutputDTO,
    FreteSelecionadoOutputDTO,
    DisponibilidadeFreteOutputDTO,
    PerfilFreteOutputDTO,
)
from .ports import (
    ShippingProfileRepository,
    ProductShippingLookup,
    PlanShippingLookup,
    RateTable,
)
from .use_cases import (
    CalcularFreteService,
    SelecionarFreteService,
    VerificarDisponibilidadeService,
    ListarPerfisFreteService,
    ObterPerfilFreteService,
    CriarPerfilFreteService,
    AtualizarPerfilFreteService,
    AlternarStatusPerfilFreteService,
    ExcluirPerfilFreteService,
)

__all__ = [
    # Entities
    "Cep",
    "Pacote",
    "ItemFrete",
    "ShippingProfileEntity",
    "ShippingOption",
    "OrderShippingData",
    "PerfilCargoSource",
    "ProdutosCargoSource",
    "PlanoCargoSource",
    # Rate tables
    "RegionalRateTable",
    "FallbackRateTable",
    "TarifaRegional",
    # Events
    "PerfilFreteCriadoEvent",
    "PerfilFreteAtualizadoEvent",
    "PerfilFreteStatusAlteradoEvent",
    "PerfilFreteExcluidoEvent",
    # DTOs
    "CotarFreteInputDTO",
    "SelecionarFreteInputDTO",
    "VerificarDisponibilidadeInputDTO",
    "CriarPerfilFreteInputDTO",
    "AtualizarPerfilFreteInputDTO",
    "CotacaoFreteOutputDTO",
    "FreteSelecionadoOutputDTO",
    "DisponibilidadeFreteOutputDTO",
    "PerfilFreteOutputDTO",
    # Ports
    "ShippingProfileRepository",
    "ProductShippingLookup",
    "PlanShippingLookup",
    "RateTable",
    # Use Cases
    "CalcularFreteService",
    "SelecionarFreteService",
    "VerificarDisponibilidadeService",
    "ListarPerfisFreteService",
    "ObterPerfilFreteService",
    "CriarPerfilFreteService",
    "AtualizarPerfilFreteService",
    "AlternarStatusPerfilFreteService",
    "ExcluirPerfilFreteService",
]
