"""
Interfaces (Ports) - Contratos entre Core e Adapters.

Este módulo define as interfaces que os Adapters devem implementar.
São os "Ports" da Arquitetura Hexagonal.

Tipos de Ports:
- Driven Ports (lado direito): UnitOfWork, EventPublisher, EventStore
- Driving Ports (lado esquerdo): Definidos nos Use Cases

Princípio: Core define interfaces; Adapters implementam.
O fluxo de dependência sempre aponta para o Core.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List

from .events import DomainEvent


class UnitOfWork(ABC):
    """
    Unit of Work - Coordena transações atômicas.

    Garante que múltiplas operações de persistência sejam
    executadas como uma única unidade: ou todas são persistidas
    ou nenhuma é.

    Pattern: Context Manager
        with uow:
            repo.save(perfil)
            uow.publish_event(event)
        # Commit automático ao sair sem erro
        # Rollback automático se exceção

    Responsabilidades:
    - Gerenciar início/fim de transação
    - Commit/Rollback coordenado
    - Enfileirar eventos para publicação pós-commit
    """

    def __init__(self):
        self._events: List[DomainEvent] = []

    def __enter__(self) -> "UnitOfWork":
        self._begin_transaction()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        """
        Finaliza contexto de transação.

        Returns:
            False para propagar exceções
        """
        if exc_type is not None:
            self.rollback()
        else:
            self.commit()
        return False  # Não suprime exceções

    @abstractmethod
    def _begin_transaction(self) -> None:
        """
        Inicia uma nova transação.

        Deve ser implementado pelo adapter específico
        (Django: transaction.atomic()).
        """
        raise NotImplementedError

    @abstractmethod
    def commit(self) -> None:
        """
        Persiste todas as mudanças e publica eventos.

        Ordem de execução:
        1. Commit da transação no banco
        2. Publicação de eventos enfileirados
        3. Limpeza de estado interno

        Note:
            Eventos só são publicados após commit bem-sucedido.
            Se commit falhar, eventos são descartados.
        """
        raise NotImplementedError

    @abstractmethod
    def rollback(self) -> None:
        """Desfaz todas as mudanças e descarta eventos."""
        raise NotImplementedError

    def publish_event(self, event: DomainEvent) -> None:
        """
        Enfileira evento para publicação após commit.

        Args:
            event: Evento de domínio a ser publicado

        Example:
            with uow:
                perfil = ShippingProfileEntity.criar(...)
                repo.save(perfil)
                uow.publish_event(PerfilFreteCriadoEvent(aggregate_id=perfil.id))
            # Evento publicado aqui, após commit
        """
        self._events.append(event)

    def collect_events(self) -> List[DomainEvent]:
        """Retorna eventos enfileirados (para testing/debugging)."""
        return list(self._events)

    def clear_events(self) -> None:
        """Limpa fila de eventos."""
        self._events.clear()


class EventPublisher(ABC):
    """
    Interface para publicação de eventos.

    Adapters implementam para integrar com diferentes
    sistemas de mensageria (Celery, logging, memória).
    """

    @abstractmethod
    def publish(self, event: DomainEvent) -> None:
        """Publica evento para consumidores."""
        raise NotImplementedError

    @abstractmethod
    def publish_batch(self, events: List[DomainEvent]) -> None:
        """Publica múltiplos eventos em batch."""
        raise NotImplementedError


class EventStore(ABC):
    """
    Interface para persistência de eventos.

    Permite armazenar histórico completo de eventos para
    auditoria do catálogo de perfis de frete.
    """

    @abstractmethod
    def append(self, event: DomainEvent, sequence: int = 0) -> None:
        """
        Adiciona evento ao store.

        Args:
            event: Evento a ser persistido
            sequence: Posição do evento no agregado
        """
        raise NotImplementedError

    @abstractmethod
    def get_events_for_aggregate(
        self,
        aggregate_id: str,
        since_sequence: int = 0,
    ) -> List[Dict[str, Any]]:
        """
        Recupera eventos de um agregado.

        Returns:
            Lista de eventos ordenados por sequência
        """
        raise NotImplementedError

    def last_sequence(self, aggregate_id: str) -> int:
        """Última sequência persistida para o agregado (0 se nenhuma)."""
        events = self.get_events_for_aggregate(aggregate_id)
        return max((e["sequence"] for e in events), default=0)


# Type alias para facilitar tipagem
UoW = UnitOfWork
