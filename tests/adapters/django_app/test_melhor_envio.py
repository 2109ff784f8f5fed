"""
Testes para MelhorEnvioRateTable (sessão HTTP mockada).
"""

from decimal import Decimal
from unittest.mock import Mock

import pytest
import requests

from src.adapters.django_app.shipping.melhor_envio import (
    MELHOR_ENVIO_SANDBOX_URL,
    MelhorEnvioRateTable,
)
from src.core.shipping.entities import Cep, Pacote
from src.core.shipping.rate_tables import FallbackRateTable, RegionalRateTable
from src.core.shared.exceptions import InfrastructureError


PACOTE = Pacote(Decimal("1"), 20, 10, 15)
DESTINO = Cep.parse("20040-020")


def resposta(json_data=None, status=200, json_error=None):
    response = Mock()
    response.status_code = status
    if status >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(f"{status} Error")
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = json_data
    return response


def tabela(session) -> MelhorEnvioRateTable:
    return MelhorEnvioRateTable(token="token-123", origem_cep="01310100", session=session)


@pytest.fixture
def servicos():
    return [
        {
            "id": 1,
            "name": "PAC",
            "price": "28.90",
            "delivery_time": 6,
            "delivery_range": {"min": 5, "max": 6},
            "company": {"name": "Correios"},
        },
        {
            "id": 2,
            "name": "SEDEX",
            "price": "45.10",
            "custom_price": "42.00",
            "delivery_time": 2,
            "company": {"name": "Correios"},
        },
        {
            "id": 3,
            "name": ".Package",
            "price": "24.50",
            "delivery_time": 4,
            "delivery_range": {"min": 3, "max": 4},
            "company": {"name": "Jadlog"},
        },
        {"id": 17, "name": "Mini Envios", "error": "Serviço indisponível para o trecho."},
        {"id": 18, "name": "Sem preço", "price": "0", "delivery_time": 3, "company": {"name": "X"}},
    ]


class TestMelhorEnvioRateTable:

    def test_envia_payload_e_token(self, servicos):
        session = Mock()
        session.post.return_value = resposta(servicos)

        tabela(session).quote(PACOTE, DESTINO)

        args, kwargs = session.post.call_args
        assert args[0] == MELHOR_ENVIO_SANDBOX_URL
        assert kwargs["json"] == {
            "from": {"postal_code": "01310100"},
            "to": {"postal_code": "20040020"},
            "package": {"weight": 1.0, "width": 20, "height": 10, "length": 15},
        }
        assert kwargs["headers"]["Authorization"] == "Bearer token-123"
        assert kwargs["timeout"] == 10.0

    def test_converte_e_ordena_opcoes(self, servicos):
        session = Mock()
        session.post.return_value = resposta(servicos)

        opcoes = tabela(session).quote(PACOTE, DESTINO)

        assert [(o.id, o.preco, o.prazo_dias) for o in opcoes] == [
            ("melhor_envio_3", Decimal("24.50"), 4),
            ("melhor_envio_1", Decimal("28.90"), 6),
            ("melhor_envio_2", Decimal("42.00"), 2),
        ]
        assert opcoes[0].recomendado is True
        assert opcoes[0].transportadora == "Jadlog"
        assert opcoes[0].prazo_descricao == "3 a 4 dias úteis"
        assert not any(o.recomendado for o in opcoes[1:])

    def test_erro_http_vira_infrastructure_error(self):
        session = Mock()
        session.post.return_value = resposta(status=503)

        with pytest.raises(InfrastructureError) as exc_info:
            tabela(session).quote(PACOTE, DESTINO)

        assert exc_info.value.source == "melhor_envio"

    def test_timeout_vira_infrastructure_error(self):
        session = Mock()
        session.post.side_effect = requests.exceptions.Timeout("read timeout")

        with pytest.raises(InfrastructureError):
            tabela(session).quote(PACOTE, DESTINO)

    def test_json_invalido_vira_infrastructure_error(self):
        session = Mock()
        session.post.return_value = resposta(json_error=ValueError("Expecting value"))

        with pytest.raises(InfrastructureError):
            tabela(session).quote(PACOTE, DESTINO)

    def test_resposta_que_nao_e_lista(self):
        session = Mock()
        session.post.return_value = resposta({"message": "Unauthenticated."})

        with pytest.raises(InfrastructureError):
            tabela(session).quote(PACOTE, DESTINO)

    def test_fallback_para_tabela_regional(self):
        session = Mock()
        session.post.side_effect = requests.exceptions.ConnectionError("dns")

        opcoes = FallbackRateTable(tabela(session), RegionalRateTable()).quote(PACOTE, DESTINO)

        assert {o.id for o in opcoes} == {"correios_pac", "correios_sedex"}

    @pytest.mark.parametrize("preco", ["NaN", "sNaN", "Infinity", "-Infinity"])
    def test_preco_nao_finito_e_ignorado(self, servicos, preco):
        servicos[0]["price"] = preco
        session = Mock()
        session.post.return_value = resposta(servicos)

        opcoes = tabela(session).quote(PACOTE, DESTINO)

        assert "melhor_envio_1" not in {o.id for o in opcoes}
        assert len(opcoes) == 2

    def test_item_que_nao_e_objeto_e_ignorado(self, servicos):
        session = Mock()
        session.post.return_value = resposta(["erro", None, 42] + servicos)

        opcoes = tabela(session).quote(PACOTE, DESTINO)

        assert [o.id for o in opcoes] == ["melhor_envio_3", "melhor_envio_1", "melhor_envio_2"]

    def test_servico_malformado_vira_infrastructure_error(self, servicos):
        servicos[0]["company"] = "Correios"
        session = Mock()
        session.post.return_value = resposta(servicos)

        with pytest.raises(InfrastructureError) as exc_info:
            tabela(session).quote(PACOTE, DESTINO)

        assert exc_info.value.source == "melhor_envio"

    @pytest.mark.parametrize("dados", [
        [{"id": 1, "name": "PAC", "price": "NaN", "delivery_time": 5, "company": {"name": "Correios"}}],
        [{"id": 1, "name": "PAC", "price": "20.00", "delivery_range": [5, 6], "company": {"name": "Correios"}}],
        ["PAC", None],
    ])
    def test_resposta_malformada_recorre_a_tabela_regional(self, dados):
        session = Mock()
        session.post.return_value = resposta(dados)

        opcoes = FallbackRateTable(tabela(session), RegionalRateTable()).quote(PACOTE, DESTINO)

        assert [o.id for o in opcoes] == ["correios_pac", "correios_sedex"]
