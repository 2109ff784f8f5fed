"""
Domain Events - Comunicação Assíncrona entre Domínios.

Este módulo define a infraestrutura base para Domain Events,
permitindo que alterações no catálogo de fretes sejam observadas
por outras partes do sistema (auditoria, métricas, alertas).

Características:
- Auto-geração de ID e timestamp
- Serializáveis para persistência/transporte
- Rastreáveis via aggregate_id

Fluxo:
    - Eventos são enfileirados no UoW e publicados após commit
    - Handlers Celery processam eventos de forma assíncrona
    - Event Store persiste o histórico
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, ClassVar
import uuid


@dataclass(frozen=False)  # frozen=False para permitir inicialização customizada
class DomainEvent(ABC):
    """
    Classe base abstrata para Domain Events.

    Um Domain Event representa algo significativo que aconteceu
    no domínio e que pode ser relevante para outras partes do sistema.

    Características:
    - Nomeados no passado (PerfilFreteCriado, não CriarPerfilFrete)
    - Representam fatos históricos
    - Contêm dados necessários para reconstruir o que aconteceu

    Attributes:
        event_id: Identificador único do evento
        aggregate_id: ID do agregado que gerou o evento
        occurred_at: Momento em que o evento ocorreu
        version: Versão do schema do evento (para evolução)

    Example:
        @dataclass
        class PerfilFreteCriadoEvent(DomainEvent):
            nome: str = ""

            @property
            def aggregate_type(self) -> str:
                return "ShippingProfile"
    """

    # Campos comuns a todos os eventos
    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    aggregate_id: str = ""
    occurred_at: datetime = field(default_factory=datetime.now)
    version: int = 1  # Para versionamento de schema

    _event_type: ClassVar[str] = ""

    def __post_init__(self):
        """Validação após inicialização."""
        if not self.aggregate_id:
            raise ValueError("aggregate_id é obrigatório")

    @property
    @abstractmethod
    def aggregate_type(self) -> str:
        """
        Retorna o tipo do agregado que gerou este evento.

        Returns:
            Nome do tipo do agregado (ex: "ShippingProfile")
        """
        ...

    @property
    def event_type(self) -> str:
        """Retorna o tipo do evento (nome da classe)."""
        return self.__class__.__name__

    def to_dict(self) -> Dict[str, Any]:
        """
        Serializa evento para dicionário.

        Útil para:
        - Persistência em Event Store
        - Envio via message broker
        - Logging estruturado

        Returns:
            Dicionário com dados do evento
        """
        return {
            "event_id": self.event_id,
            "event_type": self.event_type,
            "aggregate_id": self.aggregate_id,
            "aggregate_type": self.aggregate_type,
            "occurred_at": self.occurred_at.isoformat(),
            "version": self.version,
            "data": self._get_event_data(),
        }

    def _get_event_data(self) -> Dict[str, Any]:
        """
        Retorna dados específicos do evento (para override em subclasses).

        Returns:
            Dicionário com dados específicos do evento
        """
        base_fields = {"event_id", "aggregate_id", "occurred_at", "version"}
        return {
            key: value
            for key, value in self.__dict__.items()
            if key not in base_fields and not key.startswith("_")
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DomainEvent":
        """
        Reconstrói evento a partir de dicionário.

        Factory method para deserialização de eventos persistidos.

        Args:
            data: Dicionário no formato produzido por to_dict()

        Returns:
            Instância do evento reconstruída
        """
        event_data = data.get("data", {})
        return cls(
            event_id=data.get("event_id", str(uuid.uuid4())),
            aggregate_id=data["aggregate_id"],
            occurred_at=datetime.fromisoformat(data["occurred_at"]),
            version=data.get("version", 1),
            **event_data,
        )

    def __repr__(self) -> str:
        return (
            f"{self.event_type}("
            f"event_id={self.event_id[:8]}..., "
            f"aggregate_id={self.aggregate_id}, "
            f"occurred_at={self.occurred_at.isoformat()}"
            f")"
        )
