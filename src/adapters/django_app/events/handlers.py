"""
Event Handlers - Processadores de Eventos de Domínio.

Handlers são executados de forma assíncrona via Celery quando
eventos do catálogo de perfis de frete são publicados.

Tipos de Handlers:
- Notificação: Alertar admins sobre perfis problemáticos
- Agregação: Métricas do catálogo
- Manutenção: Limpeza do Event Store, auditoria periódica

Padrão:
    @shared_task(bind=True, ...)
    def handle_<evento>(self, event_data: dict) -> None:
        # event_data no formato de DomainEvent.to_dict()
"""

import logging
from datetime import timedelta
from typing import Any, Dict, List

from celery import shared_task
from django.utils import timezone

logger = logging.getLogger(__name__)


def _payload(event_data: Dict[str, Any]) -> Dict[str, Any]:
    return event_data.get('data') or {}


# =============================================================================
# Event Handlers - Perfis de Frete
# =============================================================================

@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=60,
    autoretry_for=(Exception,),
    acks_late=True,
)
def handle_perfil_frete_criado(self, event_data: Dict[str, Any]) -> None:
    """
    Handler para PerfilFreteCriadoEvent.

    Ações:
    - Registrar métrica de catálogo
    """
    profile_id = event_data.get('aggregate_id')
    data = _payload(event_data)

    logger.info(
        f"[HANDLER] PerfilFreteCriado: {profile_id} | "
        f"{data.get('nome')} | {data.get('peso_kg')}kg {data.get('dimensoes')}"
    )

    record_metric.delay(
        metric_name='shipping_profiles_created',
        value=1,
        tags={},
    )


@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=60,
    acks_late=True,
)
def handle_perfil_frete_atualizado(self, event_data: Dict[str, Any]) -> None:
    """Handler para PerfilFreteAtualizadoEvent."""
    profile_id = event_data.get('aggregate_id')
    campos = _payload(event_data).get('campos_alterados', [])

    logger.info(f"[HANDLER] PerfilFreteAtualizado: {profile_id} | campos={campos}")

    record_metric.delay(
        metric_name='shipping_profiles_updated',
        value=1,
        tags={'campos': ','.join(sorted(campos))},
    )


@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=60,
    acks_late=True,
)
def handle_perfil_frete_status_alterado(self, event_data: Dict[str, Any]) -> None:
    """
    Handler para PerfilFreteStatusAlteradoEvent.

    Ações:
    - Se o perfil foi desativado e ainda tem produtos/planos
      vinculados, alertar admins: a cotação desses itens passa a falhar.
    """
    try:
        profile_id = event_data.get('aggregate_id')
        ativo = _payload(event_data).get('ativo', True)

        logger.info(f"[HANDLER] PerfilFreteStatusAlterado: {profile_id} | ativo={ativo}")

        if ativo:
            return

        from src.config.container import get_container

        repo = get_container().shipping_profile_repository()
        produtos, planos = repo.count_usage(profile_id)

        if produtos or planos:
            notify_admins.delay(
                message=(
                    f"Perfil de frete {profile_id} desativado com "
                    f"{produtos} produto(s) e {planos} plano(s) vinculados"
                ),
                priority='high',
            )

    except Exception as e:
        logger.error(f"Erro no handler PerfilFreteStatusAlterado: {e}", exc_info=True)
        raise


@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=60,
    acks_late=True,
)
def handle_perfil_frete_excluido(self, event_data: Dict[str, Any]) -> None:
    """Handler para PerfilFreteExcluidoEvent."""
    profile_id = event_data.get('aggregate_id')
    nome = _payload(event_data).get('nome', '')

    logger.info(f"[HANDLER] PerfilFreteExcluido: {profile_id} | {nome}")

    record_metric.delay(
        metric_name='shipping_profiles_deleted',
        value=1,
        tags={},
    )


# =============================================================================
# Event Dispatcher (Router)
# =============================================================================

EVENT_HANDLERS = {
    'PerfilFreteCriadoEvent': handle_perfil_frete_criado,
    'PerfilFreteAtualizadoEvent': handle_perfil_frete_atualizado,
    'PerfilFreteStatusAlteradoEvent': handle_perfil_frete_status_alterado,
    'PerfilFreteExcluidoEvent': handle_perfil_frete_excluido,
}


@shared_task(bind=True, max_retries=5, default_retry_delay=30)
def dispatch_domain_event(self, event_type: str, event_data: Dict[str, Any]) -> None:
    """
    Dispatcher central para Domain Events.

    Args:
        event_type: Tipo do evento (ex: 'PerfilFreteCriadoEvent')
        event_data: Dados do evento serializado
    """
    handler = EVENT_HANDLERS.get(event_type)

    if handler:
        logger.info(f"[DISPATCHER] Roteando {event_type} para handler")
        handler.delay(event_data)
    else:
        logger.warning(f"[DISPATCHER] Handler não encontrado para {event_type}")


# =============================================================================
# Notification / Metric Tasks
# =============================================================================

@shared_task(bind=True, max_retries=3, default_retry_delay=60)
def notify_admins(self, message: str, priority: str = 'normal') -> None:
    """
    Notifica administradores da loja.

    Args:
        message: Mensagem
        priority: Prioridade da notificação
    """
    log = logger.warning if priority == 'high' else logger.info
    log(f"[NOTIFICATION] Admins [{priority}]: {message}")


@shared_task(bind=True, ignore_result=True)
def record_metric(
    self,
    metric_name: str,
    value: float,
    tags: Dict[str, str] = None,
) -> None:
    """
    Registra métrica para monitoramento.

    Args:
        metric_name: Nome da métrica
        value: Valor
        tags: Tags para dimensões
    """
    logger.info(f"[METRIC] {metric_name}={value} | tags={tags or {}}")


# =============================================================================
# Scheduled Tasks (Beat)
# =============================================================================

@shared_task(bind=True)
def audit_inactive_profiles_in_use(self) -> List[Dict[str, Any]]:
    """
    Procura perfis desativados ainda vinculados a produtos ou planos.

    Executada diariamente pelo Celery Beat.

    Returns:
        Lista de {id, name, products, subscriptionPlans}
    """
    logger.info("[SCHEDULED] Auditando perfis de frete inativos em uso...")

    try:
        from src.config.container import get_container

        listar = get_container().listar_perfis_frete_service()
        perfis = listar.execute(incluir_uso=True)

        problemas = [
            {
                'id': p.id,
                'name': p.nome,
                'products': p.total_produtos,
                'subscriptionPlans': p.total_planos,
            }
            for p in perfis
            if not p.ativo and p.em_uso
        ]

        for problema in problemas:
            notify_admins.delay(
                message=(
                    f"Perfil inativo '{problema['name']}' ainda vinculado a "
                    f"{problema['products']} produto(s) e "
                    f"{problema['subscriptionPlans']} plano(s)"
                ),
                priority='high',
            )

        record_metric.delay(
            metric_name='shipping_profiles_inactive_in_use',
            value=len(problemas),
            tags={},
        )

        logger.info(f"[SCHEDULED] {len(problemas)} perfis inativos em uso")
        return problemas

    except Exception as e:
        logger.error(f"Erro ao auditar perfis de frete: {e}", exc_info=True)
        return []


@shared_task(bind=True)
def cleanup_old_events(self, days: int = 90) -> int:
    """
    Limpa eventos antigos do Event Store.

    Executada semanalmente pelo Celery Beat.

    Args:
        days: Número de dias para manter eventos

    Returns:
        Número de eventos removidos
    """
    logger.info(f"[SCHEDULED] Limpando eventos com mais de {days} dias...")

    try:
        from src.adapters.django_app.shipping.models import DomainEventModel

        cutoff_date = timezone.now() - timedelta(days=days)

        deleted, _ = DomainEventModel.objects.filter(
            occurred_at__lt=cutoff_date
        ).delete()

        logger.info(f"[SCHEDULED] {deleted} eventos removidos")
        return deleted

    except Exception as e:
        logger.error(f"Erro ao limpar eventos: {e}", exc_info=True)
        return 0
