"""
Repositórios Django do domínio de Frete.

Implementam as interfaces (Ports) definidas em src/core/shipping/ports.py.
São DRIVEN ADAPTERS - acionados pelo Core em resposta a operações.

Responsabilidades:
- CRUD de perfis de frete
- Consulta de produtos/planos com perfil (select_related)
- Event Store
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple
import logging

from django.db.models import Max

from src.core.shipping.entities import ItemFrete, ShippingProfileEntity
from src.core.shared.events import DomainEvent
from src.core.shared.interfaces import EventStore

from .models import (
    DomainEventModel,
    ProductModel,
    ShippingProfileModel,
    SubscriptionPlanModel,
)
from .mappers import DomainEventMapper, ItemFreteMapper, ShippingProfileMapper

logger = logging.getLogger(__name__)


class DjangoShippingProfileRepository:
    """
    Implementação Django do ShippingProfileRepository.

    Example:
        repo = DjangoShippingProfileRepository()
        repo.save(perfil)
        perfil = repo.get_by_id("uuid-here")
        produtos, planos = repo.count_usage(perfil.id)
    """

    def __init__(self):
        self._mapper = ShippingProfileMapper()

    def save(self, profile: ShippingProfileEntity) -> None:
        """
        Persiste perfil (create ou update).

        Note:
            Usa update_or_create para atomicidade
        """
        logger.debug(f"Saving shipping profile: {profile.id}")

        ShippingProfileModel.objects.update_or_create(
            id=profile.id,
            defaults=self._mapper.to_defaults(profile),
        )

        logger.info(f"Shipping profile saved: {profile.id}")

    def get_by_id(self, profile_id: str) -> Optional[ShippingProfileEntity]:
        try:
            model = ShippingProfileModel.objects.get(id=profile_id)
            return self._mapper.to_entity(model)
        except ShippingProfileModel.DoesNotExist:
            logger.debug(f"Shipping profile not found: {profile_id}")
            return None

    def delete(self, profile_id: str) -> None:
        """
        Remove perfil do banco.

        Note:
            Não lança erro se perfil não existir. Perfis vinculados
            são protegidos pela FK (on_delete=PROTECT).
        """
        deleted_count, _ = ShippingProfileModel.objects.filter(id=profile_id).delete()

        if deleted_count > 0:
            logger.info(f"Shipping profile deleted: {profile_id}")
        else:
            logger.debug(f"Shipping profile not found for deletion: {profile_id}")

    def list_all(self, apenas_ativos: bool = False) -> List[ShippingProfileEntity]:
        queryset = ShippingProfileModel.objects.order_by('nome')
        if apenas_ativos:
            queryset = queryset.filter(ativo=True)
        return self._mapper.to_entity_list(queryset)

    def count_usage(self, profile_id: str) -> Tuple[int, int]:
        produtos = ProductModel.objects.filter(perfil_frete_id=profile_id).count()
        planos = SubscriptionPlanModel.objects.filter(perfil_frete_id=profile_id).count()
        return produtos, planos

    def exists(self, profile_id: str) -> bool:
        return ShippingProfileModel.objects.filter(id=profile_id).exists()


class DjangoProductShippingLookup:
    """Consulta de produtos com perfil de frete (uma query, sem N+1)."""

    def get_by_ids(self, product_ids: Sequence[str]) -> Dict[str, ItemFrete]:
        queryset = (
            ProductModel.objects
            .select_related('perfil_frete')
            .filter(id__in=list(product_ids))
        )
        return {model.id: ItemFreteMapper.to_item(model) for model in queryset}


class DjangoPlanShippingLookup:
    """Consulta de planos de assinatura com perfil de frete."""

    def get_by_id(self, plan_id: str) -> Optional[ItemFrete]:
        model = (
            SubscriptionPlanModel.objects
            .select_related('perfil_frete')
            .filter(id=plan_id)
            .first()
        )
        return ItemFreteMapper.to_item(model) if model else None


class DjangoEventStore(EventStore):
    """
    Event Store usando Django ORM.

    Persiste Domain Events para auditoria e replay.
    """

    def append(self, event: DomainEvent, sequence: int = 0) -> None:
        model = DomainEventMapper.to_model(event=event, sequence=sequence)
        model.save()

        logger.debug(f"Event stored: {event.event_type} for {event.aggregate_id}")

    def get_events_for_aggregate(
        self,
        aggregate_id: str,
        since_sequence: int = 0,
    ) -> List[Dict[str, Any]]:
        """
        Recupera eventos de um agregado.

        Args:
            aggregate_id: ID do agregado
            since_sequence: Sequência inicial

        Returns:
            Lista de eventos em formato dict
        """
        events = (
            DomainEventModel.objects
            .filter(aggregate_id=aggregate_id, sequence__gte=since_sequence)
            .order_by('sequence')
        )

        return [
            {
                'event_id': e.event_id,
                'event_type': e.event_type,
                'aggregate_id': e.aggregate_id,
                'event_data': e.event_data,
                'sequence': e.sequence,
                'occurred_at': e.occurred_at,
                'user_id': e.user_id,
            }
            for e in events
        ]

    def last_sequence(self, aggregate_id: str) -> int:
        result = DomainEventModel.objects.filter(
            aggregate_id=aggregate_id
        ).aggregate(ultima=Max('sequence'))
        return result['ultima'] or 0
