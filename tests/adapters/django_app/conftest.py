"""
Fixtures pytest para testes com Django.

Django é configurado em tests/conftest.py (sqlite em memória).
Aqui ficam as factories de models e os fakes compartilhados.
"""

import uuid
from decimal import Decimal
from unittest.mock import Mock

import pytest


@pytest.fixture
def profile_model_factory():
    """Factory para criar ShippingProfileModel para testes."""
    from src.adapters.django_app.shipping.models import ShippingProfileModel
    from django.utils import timezone

    def create_profile(**kwargs):
        defaults = {
            'id': str(uuid.uuid4()),
            'nome': 'Caixa Pequena',
            'peso_kg': Decimal('1.000'),
            'largura_cm': 20,
            'altura_cm': 10,
            'comprimento_cm': 15,
            'ativo': True,
            'criado_em': timezone.now(),
            'atualizado_em': timezone.now(),
        }
        defaults.update(kwargs)
        return ShippingProfileModel.objects.create(**defaults)

    return create_profile


@pytest.fixture
def product_model_factory():
    """Factory para criar ProductModel para testes."""
    from src.adapters.django_app.shipping.models import ProductModel

    def create_product(**kwargs):
        defaults = {
            'id': str(uuid.uuid4()),
            'nome': 'Café Especial 250g',
            'ativo': True,
        }
        defaults.update(kwargs)
        return ProductModel.objects.create(**defaults)

    return create_product


@pytest.fixture
def plan_model_factory():
    """Factory para criar SubscriptionPlanModel para testes."""
    from src.adapters.django_app.shipping.models import SubscriptionPlanModel

    def create_plan(**kwargs):
        defaults = {
            'id': str(uuid.uuid4()),
            'nome': 'Clube Mensal',
            'ativo': True,
        }
        defaults.update(kwargs)
        return SubscriptionPlanModel.objects.create(**defaults)

    return create_plan


@pytest.fixture
def sample_profile_entity():
    """Cria entidade de perfil para testes."""
    from src.core.shipping.entities import ShippingProfileEntity

    return ShippingProfileEntity.criar(
        nome="Caixa Pequena",
        peso_kg=Decimal("1.0"),
        largura_cm=20,
        altura_cm=10,
        comprimento_cm=15,
    )


@pytest.fixture
def inmemory_uow():
    """Unit of Work em memória para testes unitários."""
    from src.adapters.django_app.shared.unit_of_work import InMemoryUnitOfWork
    return InMemoryUnitOfWork()


@pytest.fixture
def anonymous_user():
    user = Mock()
    user.is_authenticated = False
    user.is_staff = False
    return user


@pytest.fixture
def customer_user():
    user = Mock()
    user.id = 7
    user.is_authenticated = True
    user.is_staff = False
    return user


@pytest.fixture
def admin_user():
    user = Mock()
    user.id = 1
    user.is_authenticated = True
    user.is_staff = True
    return user
