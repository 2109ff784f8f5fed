"""
Testes Unitários para as Tabelas de Frete.

Coverage:
- RegionalRateTable: PAC/SEDEX por UF, preço mínimo, peso cúbico,
  cargas grandes e região desconhecida
- FallbackRateTable: Reserva em falha ou ausência de opções
"""

import pytest
from decimal import Decimal
from unittest.mock import Mock

from src.core.shipping.entities import Cep, Pacote, ShippingOption
from src.core.shipping.rate_tables import (
    FallbackRateTable,
    RegionalRateTable,
    TarifaRegional,
)
from src.core.shared.exceptions import InfrastructureError


SAO_PAULO = Cep.parse("01310-100")
RIO = Cep.parse("20040-020")
SEM_UF = Cep.parse("00000-000")

CAIXA_1KG = Pacote(Decimal("1"), 20, 10, 15)


def opcoes_por_id(opcoes):
    return {o.id: o for o in opcoes}


class TestRegionalRateTable:
    """Testes para a tabela regional."""

    def test_caixa_de_1kg_para_sp(self):
        opcoes = opcoes_por_id(RegionalRateTable().quote(CAIXA_1KG, SAO_PAULO))

        pac = opcoes["correios_pac"]
        assert pac.preco == Decimal("31.80")
        assert pac.prazo_dias == 5
        assert pac.prazo_descricao == "3 a 7 dias úteis"
        assert pac.recomendado is True

        sedex = opcoes["correios_sedex"]
        assert sedex.preco == Decimal("57.24")
        assert sedex.prazo_dias == 1
        assert sedex.recomendado is False

    def test_caixa_de_2kg_para_rj(self):
        pacote = Pacote(Decimal("2"), 20, 10, 15)

        opcoes = opcoes_por_id(RegionalRateTable().quote(pacote, RIO))

        assert opcoes["correios_pac"].preco == Decimal("75.60")
        assert opcoes["correios_pac"].prazo_dias == 7
        assert opcoes["correios_sedex"].preco == Decimal("136.08")
        assert opcoes["correios_sedex"].prazo_dias == 2

    def test_pacote_leve_paga_tarifa_base(self):
        pacote = Pacote(Decimal("0.3"), 10, 10, 10)

        opcoes = opcoes_por_id(RegionalRateTable().quote(pacote, SAO_PAULO))

        assert opcoes["correios_pac"].preco == Decimal("15.90")

    def test_preco_minimo(self):
        pacote = Pacote(Decimal("0.3"), 10, 10, 10)
        tabela = RegionalRateTable(preco_minimo=Decimal("20.00"))

        opcoes = opcoes_por_id(tabela.quote(pacote, SAO_PAULO))

        assert opcoes["correios_pac"].preco == Decimal("20.00")
        assert opcoes["correios_sedex"].preco == Decimal("36.00")

    def test_peso_cubico_prevalece(self):
        pacote = Pacote(Decimal("0.2"), 40, 30, 30)

        opcoes = opcoes_por_id(RegionalRateTable().quote(pacote, SAO_PAULO))

        assert opcoes["correios_pac"].preco == Decimal("190.80")

    def test_regiao_desconhecida_usa_tarifa_padrao(self):
        opcoes = opcoes_por_id(RegionalRateTable().quote(CAIXA_1KG, SEM_UF))

        assert opcoes["correios_pac"].preco == Decimal("79.80")
        assert opcoes["correios_pac"].prazo_dias == 14

    def test_regiao_desconhecida_sem_tarifa_padrao(self):
        tabela = RegionalRateTable(tarifa_padrao=None)

        assert tabela.quote(CAIXA_1KG, SEM_UF) == []

    def test_tarifas_customizadas(self):
        tabela = RegionalRateTable(
            tarifas={"SP": TarifaRegional("SP", Decimal("10.00"), 2)},
            tarifa_padrao=None,
        )

        assert tabela.quote(CAIXA_1KG, RIO) == []
        pac = opcoes_por_id(tabela.quote(CAIXA_1KG, SAO_PAULO))["correios_pac"]
        assert pac.preco == Decimal("20.00")
        assert pac.prazo_dias == 4

    @pytest.mark.parametrize("pacote, pac, sedex", [
        (Pacote(Decimal("30"), 20, 10, 15), Decimal("954.00"), Decimal("1717.20")),
        (Pacote(Decimal("1"), 100, 100, 100), Decimal("5300.00"), Decimal("9540.00")),
        (Pacote(Decimal("1"), 60, 60, 60), Decimal("1144.80"), Decimal("2060.64")),
    ])
    def test_pacote_no_limite_do_perfil_e_cotado(self, pacote, pac, sedex):
        opcoes = opcoes_por_id(RegionalRateTable().quote(pacote, SAO_PAULO))

        assert opcoes["correios_pac"].preco == pac
        assert opcoes["correios_sedex"].preco == sedex

    def test_carrinho_empilhado_alto_e_cotado(self):
        """11 pacotes padrão empilhados: 5,5kg 20x110x30 → peso cúbico 11kg."""
        carrinho = Pacote.combinar([Pacote(Decimal("0.5"), 20, 10, 30)] * 11)

        opcoes = opcoes_por_id(RegionalRateTable().quote(carrinho, SAO_PAULO))

        assert carrinho.altura_cm == 110
        assert opcoes["correios_pac"].preco == Decimal("349.80")

    def test_divisor_cubico_customizado(self):
        tabela = RegionalRateTable(divisor_cubico=1000)

        pac = opcoes_por_id(tabela.quote(CAIXA_1KG, SAO_PAULO))["correios_pac"]

        assert pac.preco == Decimal("95.40")

    def test_deterministico(self):
        tabela = RegionalRateTable()

        assert tabela.quote(CAIXA_1KG, SAO_PAULO) == tabela.quote(CAIXA_1KG, SAO_PAULO)


class TestFallbackRateTable:
    """Testes para a combinação primária + reserva."""

    @pytest.fixture
    def opcao_externa(self):
        return ShippingOption("melhor_envio_1", "Jadlog", ".Package", Decimal("22.50"), 4)

    def test_usa_primaria_quando_disponivel(self, opcao_externa):
        primaria = Mock()
        primaria.quote.return_value = [opcao_externa]
        reserva = Mock()

        opcoes = FallbackRateTable(primaria, reserva).quote(CAIXA_1KG, SAO_PAULO)

        assert opcoes == [opcao_externa]
        reserva.quote.assert_not_called()

    def test_usa_reserva_em_falha_de_infraestrutura(self):
        primaria = Mock()
        primaria.quote.side_effect = InfrastructureError("timeout", source="melhor_envio")

        opcoes = FallbackRateTable(primaria, RegionalRateTable()).quote(CAIXA_1KG, SAO_PAULO)

        assert {o.id for o in opcoes} == {"correios_pac", "correios_sedex"}

    def test_usa_reserva_quando_primaria_sem_opcoes(self):
        primaria = Mock()
        primaria.quote.return_value = []

        opcoes = FallbackRateTable(primaria, RegionalRateTable()).quote(CAIXA_1KG, SAO_PAULO)

        assert len(opcoes) == 2

    def test_outros_erros_propagam(self):
        primaria = Mock()
        primaria.quote.side_effect = KeyError("bug")

        with pytest.raises(KeyError):
            FallbackRateTable(primaria, RegionalRateTable()).quote(CAIXA_1KG, SAO_PAULO)
