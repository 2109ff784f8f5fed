"""
Ports (Interfaces) do Domínio de Frete.

Define os contratos que os Adapters de infraestrutura devem implementar
para que o calculador de frete resolva a carga e obtenha tarifas.

Tipos de Ports:
- ShippingProfileRepository: CRUD de perfis de frete
- ProductShippingLookup: Consulta de produtos com seus perfis
- PlanShippingLookup: Consulta de planos de assinatura com seus perfis
- RateTable: Estratégia de tarifação (tabela regional, API externa)

Princípio:
    Core define interfaces → Adapters implementam
    Dependências sempre apontam para o Core

Example:
    # No Adapter (Django)
    class DjangoShippingProfileRepository:
        def get_by_id(self, profile_id: str) -> Optional[ShippingProfileEntity]:
            model = ShippingProfileModel.objects.get(id=profile_id)
            return ShippingProfileMapper.to_entity(model)
"""

from typing import Dict, List, Optional, Protocol, Sequence, Tuple, runtime_checkable

from .entities import Cep, ItemFrete, Pacote, ShippingOption, ShippingProfileEntity


@runtime_checkable
class ShippingProfileRepository(Protocol):
    """
    Interface para persistência de Perfis de Frete.

    Implementações:
    - DjangoShippingProfileRepository (PostgreSQL via ORM)
    - InMemoryShippingProfileRepository (para testes)
    """

    def save(self, profile: ShippingProfileEntity) -> None:
        """Persiste perfil (create ou update)."""
        ...

    def get_by_id(self, profile_id: str) -> Optional[ShippingProfileEntity]:
        """
        Busca perfil por ID.

        Returns:
            Entidade encontrada ou None se não existir
        """
        ...

    def delete(self, profile_id: str) -> None:
        """Remove perfil do repositório."""
        ...

    def list_all(self, apenas_ativos: bool = False) -> List[ShippingProfileEntity]:
        """
        Lista perfis ordenados por nome.

        Args:
            apenas_ativos: Se True, omite perfis desativados
        """
        ...

    def count_usage(self, profile_id: str) -> Tuple[int, int]:
        """
        Conta quantos produtos e planos referenciam o perfil.

        Returns:
            Tupla (total_produtos, total_planos)
        """
        ...


@runtime_checkable
class ProductShippingLookup(Protocol):
    """Consulta de produtos com o perfil de frete associado."""

    def get_by_ids(self, product_ids: Sequence[str]) -> Dict[str, ItemFrete]:
        """
        Busca produtos pelos IDs.

        Returns:
            Dict id → ItemFrete, apenas para IDs encontrados
        """
        ...


@runtime_checkable
class PlanShippingLookup(Protocol):
    """Consulta de planos de assinatura com o perfil de frete associado."""

    def get_by_id(self, plan_id: str) -> Optional[ItemFrete]:
        ...


@runtime_checkable
class RateTable(Protocol):
    """
    Estratégia de tarifação.

    Recebe o pacote resolvido e o CEP de destino (de onde se obtém
    a região) e devolve as opções de frete. Lista vazia significa
    que nenhuma transportadora atende.

    Raises:
        InfrastructureError: Se a fonte de tarifas estiver indisponível
    """

    def quote(self, pacote: Pacote, destino: Cep) -> List[ShippingOption]:
        ...


# =============================================================================
# Implementações em memória
# =============================================================================

class InMemoryProductShippingLookup:
    """
    Catálogo de produtos em memória.

    Útil para:
    - Testes unitários
    - Prototipagem
    """

    def __init__(self, items: Sequence[ItemFrete] = ()):
        self._items: Dict[str, ItemFrete] = {item.id: item for item in items}

    def add(self, item: ItemFrete) -> None:
        self._items[item.id] = item

    def get_by_ids(self, product_ids: Sequence[str]) -> Dict[str, ItemFrete]:
        return {pid: self._items[pid] for pid in product_ids if pid in self._items}

    def list_all(self) -> List[ItemFrete]:
        return list(self._items.values())


class InMemoryPlanShippingLookup:
    """Catálogo de planos de assinatura em memória."""

    def __init__(self, items: Sequence[ItemFrete] = ()):
        self._items: Dict[str, ItemFrete] = {item.id: item for item in items}

    def add(self, item: ItemFrete) -> None:
        self._items[item.id] = item

    def get_by_id(self, plan_id: str) -> Optional[ItemFrete]:
        return self._items.get(plan_id)

    def list_all(self) -> List[ItemFrete]:
        return list(self._items.values())


class InMemoryShippingProfileRepository:
    """
    Implementação em memória do ShippingProfileRepository.

    O uso de cada perfil é contado a partir dos catálogos em memória
    informados (produtos e planos).

    Não usar em produção!

    Example:
        repo = InMemoryShippingProfileRepository()
        repo.save(perfil)
        found = repo.get_by_id(perfil.id)
    """

    def __init__(
        self,
        produtos: Optional[InMemoryProductShippingLookup] = None,
        planos: Optional[InMemoryPlanShippingLookup] = None,
    ):
        self._profiles: Dict[str, ShippingProfileEntity] = {}
        self._produtos = produtos
        self._planos = planos

    def save(self, profile: ShippingProfileEntity) -> None:
        self._profiles[profile.id] = profile

    def get_by_id(self, profile_id: str) -> Optional[ShippingProfileEntity]:
        return self._profiles.get(profile_id)

    def delete(self, profile_id: str) -> None:
        self._profiles.pop(profile_id, None)

    def list_all(self, apenas_ativos: bool = False) -> List[ShippingProfileEntity]:
        perfis = sorted(self._profiles.values(), key=lambda p: p.nome)
        if apenas_ativos:
            perfis = [p for p in perfis if p.ativo]
        return perfis

    def count_usage(self, profile_id: str) -> Tuple[int, int]:
        def contar(catalogo) -> int:
            if catalogo is None:
                return 0
            return len([
                item for item in catalogo.list_all()
                if item.perfil is not None and item.perfil.id == profile_id
            ])

        return contar(self._produtos), contar(self._planos)

    def exists(self, profile_id: str) -> bool:
        return profile_id in self._profiles

    def clear(self) -> None:
        """Limpa todos os dados (útil para testes)."""
        self._profiles.clear()
