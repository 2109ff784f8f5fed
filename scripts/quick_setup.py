#!/usr/bin/env python
"""
Setup rápido para desenvolvimento local.

Este script:
1. Configura Django settings
2. Cria banco de dados SQLite
3. Executa migrations
4. Cria perfis de frete, produtos e planos de exemplo (opcional)
5. Faz uma cotação de teste (opcional)

Uso:
    python scripts/quick_setup.py
    python scripts/quick_setup.py --with-sample-data
    python scripts/quick_setup.py --quote 20040-020
"""

import os
import sys
import argparse
import uuid
from decimal import Decimal

# Adicionar src ao path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def setup_django():
    """Configura Django para uso standalone."""
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'src.config.settings')

    # Forçar SQLite para desenvolvimento rápido
    os.environ['DATABASE_URL'] = 'sqlite:///db.sqlite3'

    import django
    django.setup()


def run_migrations():
    """Executa migrations."""
    from django.core.management import call_command

    print("📦 Executando migrations...")
    call_command('migrate', verbosity=1)
    print("✅ Migrations concluídas!")


SAMPLE_PROFILES = [
    {'nome': 'Envelope', 'peso_kg': Decimal('0.300'), 'largura_cm': 16, 'altura_cm': 4, 'comprimento_cm': 24},
    {'nome': 'Caixa Pequena', 'peso_kg': Decimal('1.000'), 'largura_cm': 20, 'altura_cm': 10, 'comprimento_cm': 15},
    {'nome': 'Caixa Média', 'peso_kg': Decimal('2.500'), 'largura_cm': 30, 'altura_cm': 20, 'comprimento_cm': 40},
]

SAMPLE_PRODUCTS = [
    ('Café Especial 250g', 'Envelope'),
    ('Kit Degustação', 'Caixa Pequena'),
    ('Moedor Manual', 'Caixa Média'),
    ('Caneca Esmaltada', None),
]

SAMPLE_PLANS = [
    ('Clube Mensal', 'Caixa Pequena'),
    ('Clube Trimestral', 'Caixa Média'),
]


def create_sample_data():
    """Cria perfis pelo use case e vincula produtos/planos."""
    from src.config.container import get_container
    from src.core.shipping.dtos import CriarPerfilFreteInputDTO
    from src.adapters.django_app.shipping.models import ProductModel, SubscriptionPlanModel
    from src.adapters.django_app.shared.unit_of_work import atomic_operation

    container = get_container()
    criar = container.criar_perfil_frete_service()

    print("📝 Criando perfis de frete...")

    perfis = {}
    for dados in SAMPLE_PROFILES:
        perfil = criar.execute(CriarPerfilFreteInputDTO(criado_por_id='setup', **dados))
        perfis[perfil.nome] = perfil.id
        print(f"   ✓ {perfil.nome} ({perfil.peso_kg} kg)")

    print("🛒 Criando produtos e planos...")

    with atomic_operation():
        for nome, perfil_nome in SAMPLE_PRODUCTS:
            ProductModel.objects.create(
                id=str(uuid.uuid4()),
                nome=nome,
                perfil_frete_id=perfis.get(perfil_nome),
            )
            print(f"   ✓ Produto: {nome} -> {perfil_nome or 'pacote padrão'}")

        for nome, perfil_nome in SAMPLE_PLANS:
            SubscriptionPlanModel.objects.create(
                id=str(uuid.uuid4()),
                nome=nome,
                perfil_frete_id=perfis.get(perfil_nome),
            )
            print(f"   ✓ Plano: {nome} -> {perfil_nome}")

    print(f"✅ {len(perfis)} perfis, {len(SAMPLE_PRODUCTS)} produtos e {len(SAMPLE_PLANS)} planos criados!")


def quote_sample(cep):
    """Cota o frete do primeiro perfil ativo para o CEP informado."""
    from src.config.container import get_container
    from src.core.shipping.dtos import CotarFreteInputDTO
    from src.core.shared.exceptions import DomainException

    container = get_container()
    perfis = container.listar_perfis_frete_service().execute(apenas_ativos=True)
    if not perfis:
        print("⚠️  Nenhum perfil ativo. Rode com --with-sample-data antes.")
        return

    perfil = perfis[0]
    print(f"🚚 Cotando '{perfil.nome}' para {cep}...")

    try:
        cotacao = container.calcular_frete_service().execute(
            CotarFreteInputDTO(cep=cep, shipping_profile_id=perfil.id)
        )
    except DomainException as e:
        print(f"❌ {e.message}")
        return

    for opcao in cotacao.opcoes:
        print(f"   • {opcao.nome}: R$ {opcao.preco} em {opcao.prazo_dias} dia(s)")


def check_connection():
    """Verifica conexão com o banco."""
    from django.db import connection

    print("🔍 Verificando conexão com o banco...")

    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
        print("✅ Conexão OK!")
        return True
    except Exception as e:
        print(f"❌ Erro de conexão: {e}")
        return False


def show_info():
    """Mostra informações do setup."""
    from django.conf import settings

    print("\n" + "=" * 60)
    print("📊 Informações do Setup")
    print("=" * 60)
    print(f"  Database Engine: {settings.DATABASES['default']['ENGINE']}")
    print(f"  Database Name: {settings.DATABASES['default']['NAME']}")
    print(f"  Debug Mode: {settings.DEBUG}")
    print(f"  CEP de origem: {settings.SHIPPING['origin_cep']}")
    print(f"  API externa: {'sim' if settings.SHIPPING['use_external_api'] else 'não'}")
    print("=" * 60)
    print("\n🚀 Próximos passos:")
    print("   1. django-admin runserver --settings=src.config.settings")
    print("   2. Acesse: http://localhost:8000/admin/")
    print("   3. POST http://localhost:8000/shipping/quote/")
    print("\n")


def main():
    parser = argparse.ArgumentParser(description='Setup rápido para desenvolvimento')
    parser.add_argument(
        '--with-sample-data',
        action='store_true',
        help='Criar perfis, produtos e planos de exemplo'
    )
    parser.add_argument(
        '--check-only',
        action='store_true',
        help='Apenas verificar conexão'
    )
    parser.add_argument(
        '--quote',
        metavar='CEP',
        help='Cotar frete de teste para o CEP informado'
    )

    args = parser.parse_args()

    print("\n" + "=" * 60)
    print("🔧 Storefront Shipping - Quick Setup")
    print("=" * 60 + "\n")

    # Configurar Django
    setup_django()

    if args.check_only:
        check_connection()
        return

    # Verificar conexão
    if not check_connection():
        print("\n⚠️  Certifique-se de que o banco de dados está rodando.")
        print("   Para usar SQLite, defina: DATABASE_URL=sqlite:///db.sqlite3")
        return

    # Executar migrations
    run_migrations()

    # Criar dados de exemplo
    if args.with_sample_data:
        create_sample_data()

    if args.quote:
        quote_sample(args.quote)

    # Mostrar informações
    show_info()


if __name__ == '__main__':
    main()
