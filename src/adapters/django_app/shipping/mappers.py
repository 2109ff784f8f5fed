"""
Mappers para conversão entre Entities (Core) e Models (Django).

Responsabilidades:
- ShippingProfileEntity ↔ ShippingProfileModel
- ProductModel / SubscriptionPlanModel → ItemFrete
- DomainEvent → DomainEventModel (para Event Store)

Princípios:
- Mappers são stateless
- Não contêm lógica de negócio
- Tratam apenas conversão de dados
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Union

from django.conf import settings
from django.utils import timezone

from src.core.shipping.entities import ItemFrete, ShippingProfileEntity
from src.core.shared.events import DomainEvent

from .models import (
    DomainEventModel,
    ProductModel,
    ShippingProfileModel,
    SubscriptionPlanModel,
)


def _aware(value: Optional[datetime]) -> Optional[datetime]:
    """Entidades usam datetime naive; com USE_TZ o banco espera aware."""
    if value is not None and settings.USE_TZ and timezone.is_naive(value):
        return timezone.make_aware(value)
    return value


class ShippingProfileMapper:
    """
    Mapper para conversão entre ShippingProfileEntity e ShippingProfileModel.

    Responsável por:
    - to_model(): Entity → Model
    - to_entity(): Model → Entity
    - to_entity_list(): List[Model] → List[Entity]
    """

    @staticmethod
    def to_model(entity: ShippingProfileEntity) -> ShippingProfileModel:
        """
        Converte entidade para model (não salva).
        """
        return ShippingProfileModel(
            id=entity.id,
            nome=entity.nome,
            peso_kg=entity.peso_kg,
            largura_cm=entity.largura_cm,
            altura_cm=entity.altura_cm,
            comprimento_cm=entity.comprimento_cm,
            ativo=entity.ativo,
            criado_em=_aware(entity.criado_em),
            atualizado_em=_aware(entity.atualizado_em),
        )

    @staticmethod
    def to_entity(model: ShippingProfileModel) -> ShippingProfileEntity:
        """
        Converte model para entidade.

        Note:
            Bypassa validações do factory method .criar()
            pois dados já foram validados na criação original
        """
        return ShippingProfileEntity(
            id=model.id,
            nome=model.nome,
            peso_kg=Decimal(model.peso_kg),
            largura_cm=model.largura_cm,
            altura_cm=model.altura_cm,
            comprimento_cm=model.comprimento_cm,
            ativo=model.ativo,
            criado_em=model.criado_em,
            atualizado_em=model.atualizado_em,
        )

    @staticmethod
    def to_entity_list(models: List[ShippingProfileModel]) -> List[ShippingProfileEntity]:
        return [ShippingProfileMapper.to_entity(model) for model in models]

    @staticmethod
    def to_defaults(entity: ShippingProfileEntity) -> dict:
        """Campos para update_or_create."""
        return {
            'nome': entity.nome,
            'peso_kg': entity.peso_kg,
            'largura_cm': entity.largura_cm,
            'altura_cm': entity.altura_cm,
            'comprimento_cm': entity.comprimento_cm,
            'ativo': entity.ativo,
            'criado_em': _aware(entity.criado_em),
            'atualizado_em': _aware(entity.atualizado_em),
        }


class ItemFreteMapper:
    """
    Converte produtos e planos em ItemFrete.

    Espera o perfil carregado via select_related('perfil_frete').
    """

    @staticmethod
    def to_item(model: Union[ProductModel, SubscriptionPlanModel]) -> ItemFrete:
        perfil = None
        if model.perfil_frete_id is not None:
            perfil = ShippingProfileMapper.to_entity(model.perfil_frete)

        return ItemFrete(
            id=model.id,
            nome=model.nome,
            ativo=model.ativo,
            perfil=perfil,
        )


class DomainEventMapper:
    """
    Mapper para conversão entre DomainEvent e DomainEventModel.

    Usado para persistir eventos no Event Store.
    """

    @staticmethod
    def to_model(event: DomainEvent, sequence: int = 0) -> DomainEventModel:
        """
        Converte DomainEvent para DomainEventModel.

        O usuário responsável é extraído do payload do evento
        (criado_por_id / alterado_por_id), quando presente.
        """
        event_data = event._get_event_data()
        user_id = event_data.get('criado_por_id') or event_data.get('alterado_por_id')

        return DomainEventModel(
            event_id=event.event_id,
            event_type=event.event_type,
            aggregate_type=event.aggregate_type,
            aggregate_id=event.aggregate_id,
            event_data=event_data,
            version=event.version,
            sequence=sequence,
            occurred_at=_aware(event.occurred_at),
            user_id=user_id,
        )
