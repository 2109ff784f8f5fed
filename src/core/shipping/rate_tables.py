"""
Tabelas de Frete (RateTable) do Domínio de Frete.

Estratégias plugáveis que transformam (pacote, CEP de destino) em
opções de frete. O calculador não conhece a origem dos preços:
recebe uma RateTable injetada.

Implementações:
- RegionalRateTable: Tarifas fixas por UF (Correios PAC/SEDEX)
- FallbackRateTable: Tenta uma tabela primária e recorre a outra

A tabela da API Melhor Envio é um adapter de infraestrutura
(src/adapters/django_app/shipping/melhor_envio.py).
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Mapping, Optional
import logging

from src.core.shared.exceptions import InfrastructureError

from .entities import Cep, Pacote, ShippingOption, arredondar_preco

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TarifaRegional:
    """
    Tarifa base de uma região.

    Attributes:
        regiao: UF (ou "Brasil" para a tarifa padrão)
        valor_fixo: Preço base para até 500g
        prazo_dias: Prazo base em dias úteis
    """

    regiao: str
    valor_fixo: Decimal
    prazo_dias: int


def _tarifa(regiao: str, valor: str, prazo: int) -> TarifaRegional:
    return TarifaRegional(regiao, Decimal(valor), prazo)


TARIFAS_POR_UF: Dict[str, TarifaRegional] = {
    t.regiao: t for t in (
        # Sudeste
        _tarifa("SP", "15.90", 3),
        _tarifa("RJ", "18.90", 5),
        _tarifa("MG", "19.90", 5),
        _tarifa("ES", "21.90", 6),
        # Sul
        _tarifa("PR", "22.90", 6),
        _tarifa("SC", "24.90", 7),
        _tarifa("RS", "26.90", 8),
        # Centro-Oeste
        _tarifa("GO", "24.90", 7),
        _tarifa("MT", "29.90", 9),
        _tarifa("MS", "27.90", 8),
        _tarifa("DF", "23.90", 6),
        # Nordeste
        _tarifa("BA", "29.90", 9),
        _tarifa("SE", "32.90", 10),
        _tarifa("AL", "33.90", 10),
        _tarifa("PE", "34.90", 10),
        _tarifa("PB", "35.90", 11),
        _tarifa("RN", "36.90", 11),
        _tarifa("CE", "37.90", 11),
        _tarifa("PI", "38.90", 12),
        _tarifa("MA", "39.90", 12),
        # Norte
        _tarifa("TO", "34.90", 10),
        _tarifa("PA", "42.90", 14),
        _tarifa("AP", "49.90", 16),
        _tarifa("AM", "54.90", 18),
        _tarifa("RR", "59.90", 20),
        _tarifa("AC", "59.90", 20),
        _tarifa("RO", "44.90", 15),
    )
}

TARIFA_PADRAO = _tarifa("Brasil", "39.90", 12)


# Divisor do peso cúbico (cm³ por kg)
DIVISOR_CUBICO = 6000


class RegionalRateTable:
    """
    Tabela de frete por UF com opções PAC e SEDEX.

    Cálculo:
        peso_tarifavel = max(peso real, peso cúbico)
        multiplicador = max(1, peso_tarifavel / 0.5)
        base = max(preco_minimo, valor_fixo * multiplicador)
        PAC   = base,       prazo = d + 2
        SEDEX = base * 1.8, prazo = max(1, d - 3)

    Sem opções quando a UF não é reconhecida e não há tarifa padrão.
    Cargas grandes (carrinhos empilhados) são cotadas pelo peso tarifável,
    sem recusa por dimensão.

    Example:
        tabela = RegionalRateTable()
        opcoes = tabela.quote(perfil.pacote, Cep.parse("01310-100"))
    """

    PESO_BASE_KG = Decimal("0.5")
    FATOR_SEDEX = Decimal("1.8")

    def __init__(
        self,
        tarifas: Optional[Mapping[str, TarifaRegional]] = None,
        tarifa_padrao: Optional[TarifaRegional] = TARIFA_PADRAO,
        preco_minimo: Decimal = Decimal("15.00"),
        divisor_cubico: int = DIVISOR_CUBICO,
    ):
        self._tarifas = dict(TARIFAS_POR_UF if tarifas is None else tarifas)
        self._tarifa_padrao = tarifa_padrao
        self._preco_minimo = Decimal(preco_minimo)
        self._divisor_cubico = divisor_cubico

    def tarifa_para(self, destino: Cep) -> Optional[TarifaRegional]:
        uf = destino.uf
        if uf and uf in self._tarifas:
            return self._tarifas[uf]
        return self._tarifa_padrao

    def quote(self, pacote: Pacote, destino: Cep) -> List[ShippingOption]:
        tarifa = self.tarifa_para(destino)
        if tarifa is None:
            logger.info(f"Região não atendida para CEP {destino.formatado}")
            return []

        peso = pacote.peso_tarifavel(self._divisor_cubico)
        multiplicador = max(Decimal("1"), peso / self.PESO_BASE_KG)
        base = max(self._preco_minimo, tarifa.valor_fixo * multiplicador)

        dias = tarifa.prazo_dias

        pac = ShippingOption(
            id="correios_pac",
            transportadora="Correios",
            servico="PAC",
            preco=arredondar_preco(base),
            prazo_dias=dias + 2,
            prazo_descricao=f"{dias} a {dias + 4} dias úteis",
            recomendado=True,
        )
        sedex = ShippingOption(
            id="correios_sedex",
            transportadora="Correios",
            servico="SEDEX",
            preco=arredondar_preco(base * self.FATOR_SEDEX),
            prazo_dias=max(1, dias - 3),
            prazo_descricao=f"{max(1, dias - 4)} a {max(2, dias - 2)} dias úteis",
        )
        return [pac, sedex]


class FallbackRateTable:
    """
    Combina uma tabela primária (ex: API externa) com uma reserva local.

    A reserva é usada quando a primária falha com InfrastructureError
    ou não retorna nenhuma opção.
    """

    def __init__(self, primaria, reserva):
        self._primaria = primaria
        self._reserva = reserva

    def quote(self, pacote: Pacote, destino: Cep) -> List[ShippingOption]:
        try:
            opcoes = self._primaria.quote(pacote, destino)
        except InfrastructureError as e:
            logger.warning(
                f"Tabela primária indisponível ({e.message}); usando tabela de reserva"
            )
            return self._reserva.quote(pacote, destino)

        if opcoes:
            return opcoes

        logger.info(
            f"Tabela primária sem opções para {destino.formatado}; usando tabela de reserva"
        )
        return self._reserva.quote(pacote, destino)
