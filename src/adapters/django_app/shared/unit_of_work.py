"""
Unit of Work - Implementação Django.

Gerencia a transação das operações de escrita do catálogo de
perfis de frete (criar, atualizar, ativar/desativar, excluir).

Responsabilidades:
- Abrir/fechar bloco transaction.atomic()
- Commit/Rollback coordenado
- Persistir eventos no Event Store dentro da mesma transação
- Publicar eventos somente após commit bem-sucedido

A cotação de frete é somente leitura e não passa pelo UoW.
"""

from typing import Dict, List, Optional
from contextlib import contextmanager
import logging

from django.db import transaction

from src.core.shared.interfaces import EventPublisher, EventStore, UnitOfWork
from src.core.shared.events import DomainEvent

logger = logging.getLogger(__name__)


class DjangoUnitOfWork(UnitOfWork):
    """
    Implementação Django do Unit of Work.

    Usa transaction.atomic() como context manager manual: a entrada
    abre o bloco e a saída confirma ou marca rollback. Funciona
    também aninhado em outro atomic() (vira savepoint).

    Example:
        with DjangoUnitOfWork(event_publisher=publisher) as uow:
            repo.save(perfil)
            uow.publish_event(PerfilFreteCriadoEvent(...))
        # Commit automático + eventos publicados

    Example com rollback:
        with DjangoUnitOfWork() as uow:
            repo.save(perfil)
            raise BusinessRuleViolationError("...")
        # Rollback automático, eventos descartados
    """

    def __init__(
        self,
        event_publisher: Optional[EventPublisher] = None,
        event_store: Optional[EventStore] = None,
        using: Optional[str] = None,
    ):
        """
        Args:
            event_publisher: Publicador de eventos (Celery, logging)
            event_store: Store para persistência de eventos
            using: Alias do banco (padrão: default)
        """
        super().__init__()
        self._event_publisher = event_publisher
        self._event_store = event_store
        self._using = using
        self._atomic = None
        self._committed = False
        self._rolled_back = False
        self._sequence_counters: Dict[str, int] = {}

    def _begin_transaction(self) -> None:
        self._committed = False
        self._rolled_back = False
        self._sequence_counters = {}
        self._atomic = transaction.atomic(using=self._using)
        self._atomic.__enter__()
        logger.debug("Transaction started")

    def commit(self) -> None:
        """
        Persiste as mudanças e publica eventos.

        Ordem de execução:
        1. Persistir eventos no Event Store (dentro da transação)
        2. Fechar o bloco atomic (commit)
        3. Publicar eventos para handlers assíncronos
        """
        if self._atomic is None:
            logger.warning("Commit sem transação ativa")
            return

        try:
            if self._event_store and self._events:
                self._persist_events()
        except Exception as e:
            logger.error(f"Falha ao persistir eventos: {e}")
            self.rollback()
            raise

        atomic, self._atomic = self._atomic, None
        atomic.__exit__(None, None, None)
        self._committed = True
        logger.debug("Transaction committed")

        if self._events:
            self._publish_events()

    def rollback(self) -> None:
        """Desfaz as mudanças e descarta eventos."""
        if self._atomic is None:
            self.clear_events()
            return

        atomic, self._atomic = self._atomic, None
        transaction.set_rollback(True, using=self._using)
        atomic.__exit__(None, None, None)
        self._rolled_back = True
        self.clear_events()
        logger.debug("Transaction rolled back")

    def _persist_events(self) -> None:
        for event in self._events:
            self._event_store.append(
                event=event,
                sequence=self._get_next_sequence(event.aggregate_id),
            )

    def _publish_events(self) -> None:
        """
        Publica eventos para handlers assíncronos.

        Falha de publicação não desfaz o commit: o evento já está
        no Event Store e pode ser reprocessado.
        """
        for event in self._events:
            logger.info(
                f"Publishing event: {event.event_type} "
                f"for aggregate {event.aggregate_id}"
            )

            if self._event_publisher:
                try:
                    self._event_publisher.publish(event)
                except Exception as e:
                    logger.error(f"Failed to publish event: {e}")

        self.clear_events()

    def _get_next_sequence(self, aggregate_id: str) -> int:
        if aggregate_id not in self._sequence_counters:
            self._sequence_counters[aggregate_id] = self._event_store.last_sequence(aggregate_id)

        self._sequence_counters[aggregate_id] += 1
        return self._sequence_counters[aggregate_id]

    @property
    def is_committed(self) -> bool:
        return self._committed

    @property
    def is_rolled_back(self) -> bool:
        return self._rolled_back


class InMemoryUnitOfWork(UnitOfWork):
    """
    Unit of Work em memória para testes.

    Não persiste nada - apenas simula comportamento
    para testes unitários sem banco de dados.

    Example:
        uow = InMemoryUnitOfWork()
        with uow:
            uow.publish_event(event)

        assert uow.committed
        assert len(uow.published_events) == 1
    """

    def __init__(self, event_publisher: Optional[EventPublisher] = None):
        super().__init__()
        self._event_publisher = event_publisher
        self._committed = False
        self._rolled_back = False
        self._published_events: List[DomainEvent] = []

    def _begin_transaction(self) -> None:
        pass

    def commit(self) -> None:
        self._committed = True
        self._published_events.extend(self._events)
        if self._event_publisher:
            self._event_publisher.publish_batch(list(self._events))
        self.clear_events()

    def rollback(self) -> None:
        self._rolled_back = True
        self.clear_events()

    @property
    def committed(self) -> bool:
        return self._committed

    @property
    def rolled_back(self) -> bool:
        return self._rolled_back

    @property
    def published_events(self) -> List[DomainEvent]:
        """Retorna eventos que foram 'publicados'."""
        return self._published_events

    def reset(self) -> None:
        """Reset para próximo teste."""
        self._committed = False
        self._rolled_back = False
        self._published_events.clear()
        self.clear_events()


# =============================================================================
# Context Manager Helper
# =============================================================================

@contextmanager
def atomic_operation(
    uow: Optional[UnitOfWork] = None,
    event_publisher: Optional[EventPublisher] = None,
    event_store: Optional[EventStore] = None,
):
    """
    Context manager para operações atômicas fora dos Use Cases
    (scripts, tasks do Celery).

    Example:
        with atomic_operation(event_store=DjangoEventStore()) as uow:
            repo.save(perfil)
            uow.publish_event(event)
    """
    if uow is None:
        uow = DjangoUnitOfWork(
            event_publisher=event_publisher,
            event_store=event_store,
        )

    with uow:
        yield uow
