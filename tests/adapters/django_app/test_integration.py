"""
Testes de integração dos adapters Django (sqlite em memória).

Testa:
- Repositórios e lookups contra o ORM
- Event Store e DjangoUnitOfWork (commit, rollback, sequência)
- Use cases ligados pelo Container DI
- Tasks Celery executadas de forma síncrona
"""

import json
from datetime import timedelta
from decimal import Decimal
from unittest.mock import Mock, patch

import pytest
from django.db.models import ProtectedError
from django.utils import timezone

from src.adapters.django_app.events.publishers import InMemoryEventPublisher
from src.adapters.django_app.shared.unit_of_work import DjangoUnitOfWork, atomic_operation
from src.adapters.django_app.shipping.models import DomainEventModel, ShippingProfileModel
from src.adapters.django_app.shipping.repositories import (
    DjangoEventStore,
    DjangoPlanShippingLookup,
    DjangoProductShippingLookup,
    DjangoShippingProfileRepository,
)
from src.core.shipping.dtos import CotarFreteInputDTO, CriarPerfilFreteInputDTO
from src.core.shipping.events import PerfilFreteCriadoEvent, PerfilFreteStatusAlteradoEvent
from src.core.shipping.use_cases import CriarPerfilFreteService, ExcluirPerfilFreteService
from src.core.shared.exceptions import BusinessRuleViolationError


pytestmark = pytest.mark.django_db


# =============================================================================
# Repositórios
# =============================================================================

class TestDjangoShippingProfileRepository:

    def test_save_e_get_by_id(self, sample_profile_entity):
        repo = DjangoShippingProfileRepository()

        repo.save(sample_profile_entity)
        encontrado = repo.get_by_id(sample_profile_entity.id)

        assert encontrado == sample_profile_entity
        assert encontrado.nome == "Caixa Pequena"
        assert encontrado.peso_kg == Decimal("1.000")
        assert (encontrado.largura_cm, encontrado.altura_cm, encontrado.comprimento_cm) == (20, 10, 15)

    def test_save_atualiza_existente(self, sample_profile_entity):
        repo = DjangoShippingProfileRepository()
        repo.save(sample_profile_entity)

        sample_profile_entity.atualizar(nome="Caixa Renomeada", altura_cm=12)
        repo.save(sample_profile_entity)

        assert ShippingProfileModel.objects.count() == 1
        assert repo.get_by_id(sample_profile_entity.id).altura_cm == 12

    def test_get_by_id_inexistente(self):
        assert DjangoShippingProfileRepository().get_by_id("nao-existe") is None

    def test_list_all(self, profile_model_factory):
        profile_model_factory(nome="Envelope")
        profile_model_factory(nome="Caixa Grande", ativo=False)
        profile_model_factory(nome="Caixa Média")
        repo = DjangoShippingProfileRepository()

        assert [p.nome for p in repo.list_all()] == ["Caixa Grande", "Caixa Média", "Envelope"]
        assert [p.nome for p in repo.list_all(apenas_ativos=True)] == ["Caixa Média", "Envelope"]

    def test_count_usage(self, profile_model_factory, product_model_factory, plan_model_factory):
        perfil = profile_model_factory()
        product_model_factory(perfil_frete=perfil)
        product_model_factory(perfil_frete=perfil)
        product_model_factory()
        plan_model_factory(perfil_frete=perfil)

        assert DjangoShippingProfileRepository().count_usage(perfil.id) == (2, 1)

    def test_delete(self, profile_model_factory):
        perfil = profile_model_factory()
        repo = DjangoShippingProfileRepository()

        repo.delete(perfil.id)
        repo.delete(perfil.id)

        assert not repo.exists(perfil.id)

    def test_fk_protege_perfil_em_uso(self, profile_model_factory, product_model_factory):
        perfil = profile_model_factory()
        product_model_factory(perfil_frete=perfil)

        with pytest.raises(ProtectedError):
            perfil.delete()


class TestDjangoLookups:

    def test_produtos_com_perfil(self, profile_model_factory, product_model_factory):
        perfil = profile_model_factory()
        com_perfil = product_model_factory(perfil_frete=perfil)
        sem_perfil = product_model_factory()

        itens = DjangoProductShippingLookup().get_by_ids([com_perfil.id, sem_perfil.id, "nao-existe"])

        assert set(itens) == {com_perfil.id, sem_perfil.id}
        assert itens[com_perfil.id].perfil.id == perfil.id
        assert itens[sem_perfil.id].perfil is None

    def test_plano(self, profile_model_factory, plan_model_factory):
        perfil = profile_model_factory(ativo=False)
        plano = plan_model_factory(perfil_frete=perfil)
        lookup = DjangoPlanShippingLookup()

        item = lookup.get_by_id(plano.id)

        assert item.nome == "Clube Mensal"
        assert item.perfil.ativo is False
        assert lookup.get_by_id("nao-existe") is None


# =============================================================================
# Event Store / Unit of Work
# =============================================================================

def evento_criado(perfil_id: str, **kwargs) -> PerfilFreteCriadoEvent:
    return PerfilFreteCriadoEvent(
        aggregate_id=perfil_id,
        nome="Caixa Pequena",
        peso_kg="1.0",
        dimensoes="20x10x15",
        **kwargs,
    )


class TestDjangoEventStore:

    def test_append_e_get(self):
        store = DjangoEventStore()

        store.append(evento_criado("perfil-1", criado_por_id="admin-1"), sequence=1)
        store.append(PerfilFreteStatusAlteradoEvent(aggregate_id="perfil-1", ativo=False), sequence=2)

        eventos = store.get_events_for_aggregate("perfil-1")

        assert [e['event_type'] for e in eventos] == [
            'PerfilFreteCriadoEvent',
            'PerfilFreteStatusAlteradoEvent',
        ]
        assert eventos[0]['user_id'] == 'admin-1'
        assert eventos[1]['event_data'] == {'ativo': False}
        assert store.last_sequence("perfil-1") == 2
        assert store.last_sequence("outro") == 0


class TestDjangoUnitOfWork:

    def test_commit_persiste_e_publica(self, sample_profile_entity):
        publisher = InMemoryEventPublisher()
        uow = DjangoUnitOfWork(event_publisher=publisher, event_store=DjangoEventStore())
        repo = DjangoShippingProfileRepository()

        with uow:
            repo.save(sample_profile_entity)
            uow.publish_event(evento_criado(sample_profile_entity.id))
            uow.publish_event(
                PerfilFreteStatusAlteradoEvent(aggregate_id=sample_profile_entity.id, ativo=True)
            )

        assert uow.is_committed
        assert repo.exists(sample_profile_entity.id)
        assert len(publisher.published_events) == 2

        sequencias = list(
            DomainEventModel.objects
            .filter(aggregate_id=sample_profile_entity.id)
            .order_by('sequence')
            .values_list('sequence', flat=True)
        )
        assert sequencias == [1, 2]

    def test_sequencia_continua_entre_transacoes(self, sample_profile_entity):
        store = DjangoEventStore()

        for _ in range(2):
            with DjangoUnitOfWork(event_store=store) as uow:
                uow.publish_event(evento_criado(sample_profile_entity.id))

        assert store.last_sequence(sample_profile_entity.id) == 2

    def test_rollback_em_excecao(self, sample_profile_entity):
        publisher = InMemoryEventPublisher()
        uow = DjangoUnitOfWork(event_publisher=publisher, event_store=DjangoEventStore())
        repo = DjangoShippingProfileRepository()

        with pytest.raises(RuntimeError):
            with uow:
                repo.save(sample_profile_entity)
                uow.publish_event(evento_criado(sample_profile_entity.id))
                raise RuntimeError("falha no meio da operação")

        assert uow.is_rolled_back
        assert not repo.exists(sample_profile_entity.id)
        assert DomainEventModel.objects.count() == 0
        assert publisher.published_events == []

    def test_falha_de_publicacao_nao_desfaz_commit(self, sample_profile_entity):
        class PublisherQuebrado(InMemoryEventPublisher):
            def publish(self, event):
                raise ConnectionError("broker fora do ar")

        repo = DjangoShippingProfileRepository()

        with DjangoUnitOfWork(event_publisher=PublisherQuebrado(), event_store=DjangoEventStore()) as uow:
            repo.save(sample_profile_entity)
            uow.publish_event(evento_criado(sample_profile_entity.id))

        assert repo.exists(sample_profile_entity.id)
        assert DomainEventModel.objects.count() == 1

    def test_atomic_operation(self, sample_profile_entity):
        with atomic_operation(event_store=DjangoEventStore()) as uow:
            DjangoShippingProfileRepository().save(sample_profile_entity)
            uow.publish_event(evento_criado(sample_profile_entity.id))

        assert DomainEventModel.objects.filter(aggregate_id=sample_profile_entity.id).exists()


# =============================================================================
# Use cases com adapters reais
# =============================================================================

class TestUseCasesComDjango:

    def test_criar_perfil_registra_evento(self):
        service = CriarPerfilFreteService(
            profile_repo=DjangoShippingProfileRepository(),
            uow=DjangoUnitOfWork(event_store=DjangoEventStore()),
        )

        output = service.execute(
            CriarPerfilFreteInputDTO(
                nome="Caixa Média",
                peso_kg=Decimal("2.5"),
                largura_cm=30,
                altura_cm=20,
                comprimento_cm=25,
                criado_por_id="1",
            )
        )

        evento = DomainEventModel.objects.get(aggregate_id=output.id)
        assert evento.event_type == "PerfilFreteCriadoEvent"
        assert evento.user_id == "1"
        assert ShippingProfileModel.objects.get(id=output.id).peso_kg == Decimal("2.500")

    def test_excluir_perfil_em_uso_bloqueado(self, profile_model_factory, product_model_factory):
        perfil = profile_model_factory()
        product_model_factory(perfil_frete=perfil)
        service = ExcluirPerfilFreteService(
            profile_repo=DjangoShippingProfileRepository(),
            uow=DjangoUnitOfWork(event_store=DjangoEventStore()),
        )

        with pytest.raises(BusinessRuleViolationError):
            service.execute(perfil.id)

        assert ShippingProfileModel.objects.filter(id=perfil.id).exists()

    def test_cotacao_pelo_container(self, profile_model_factory, product_model_factory):
        from src.config.container import get_container

        perfil = profile_model_factory()
        produto = product_model_factory(perfil_frete=perfil)

        output = get_container().calcular_frete_service().execute(
            CotarFreteInputDTO(cep="01310100", product_ids=(produto.id,))
        )

        assert [(o.id, o.preco) for o in output.opcoes] == [
            ("correios_pac", Decimal("31.80")),
            ("correios_sedex", Decimal("57.24")),
        ]


class TestShippingUrls:

    def test_cotacao_via_client(self, client, profile_model_factory):
        perfil = profile_model_factory()

        response = client.post(
            '/quote/',
            data=json.dumps({'cep': '01310-100', 'shippingProfileId': perfil.id}),
            content_type='application/json',
        )

        assert response.status_code == 200
        body = response.json()
        assert body['meta']['uf'] == 'SP'
        assert body['data'][0]['price'] == 31.8

    def test_admin_exige_sessao(self, client):
        response = client.get('/profiles/')

        assert response.status_code == 401


# =============================================================================
# Tasks Celery (execução síncrona)
# =============================================================================

class TestEventHandlers:

    def test_desativar_perfil_em_uso_notifica_admins(
        self, profile_model_factory, product_model_factory
    ):
        from src.adapters.django_app.events import handlers

        perfil = profile_model_factory(ativo=False)
        product_model_factory(perfil_frete=perfil)
        evento = PerfilFreteStatusAlteradoEvent(aggregate_id=perfil.id, ativo=False)

        with patch.object(handlers, 'notify_admins') as notify:
            handlers.handle_perfil_frete_status_alterado(evento.to_dict())

        notify.delay.assert_called_once()
        assert notify.delay.call_args[1]['priority'] == 'high'

    def test_ativar_perfil_nao_notifica(self, profile_model_factory):
        from src.adapters.django_app.events import handlers

        perfil = profile_model_factory()
        evento = PerfilFreteStatusAlteradoEvent(aggregate_id=perfil.id, ativo=True)

        with patch.object(handlers, 'notify_admins') as notify:
            handlers.handle_perfil_frete_status_alterado(evento.to_dict())

        notify.delay.assert_not_called()

    def test_auditoria_de_perfis_inativos(
        self, profile_model_factory, product_model_factory, plan_model_factory
    ):
        from src.adapters.django_app.events import handlers

        inativo = profile_model_factory(nome="Caixa Antiga", ativo=False)
        profile_model_factory(nome="Caixa Sem Uso", ativo=False)
        product_model_factory(perfil_frete=inativo)
        plan_model_factory(perfil_frete=inativo)

        with patch.object(handlers, 'notify_admins'), patch.object(handlers, 'record_metric'):
            problemas = handlers.audit_inactive_profiles_in_use()

        assert problemas == [
            {'id': inativo.id, 'name': 'Caixa Antiga', 'products': 1, 'subscriptionPlans': 1},
        ]

    def test_cleanup_old_events(self):
        from src.adapters.django_app.events import handlers

        DjangoEventStore().append(evento_criado("perfil-1"), sequence=1)
        DomainEventModel.objects.update(occurred_at=timezone.now() - timedelta(days=120))
        DjangoEventStore().append(evento_criado("perfil-2"), sequence=1)

        assert handlers.cleanup_old_events(days=90) == 1
        assert list(DomainEventModel.objects.values_list('aggregate_id', flat=True)) == ["perfil-2"]

    def test_dispatch_roteia_para_handler(self):
        from src.adapters.django_app.events import handlers

        evento = evento_criado("perfil-1")

        handler = Mock()
        payload = evento.to_dict()

        with patch.dict(handlers.EVENT_HANDLERS, {'PerfilFreteCriadoEvent': handler}):
            handlers.dispatch_domain_event(evento.event_type, payload)

        handler.delay.assert_called_once_with(payload)
