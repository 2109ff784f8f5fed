"""
RateTable da API Melhor Envio.

Adapter de infraestrutura: cota o pacote na API de cálculo do
Melhor Envio (sandbox ou produção) e converte a resposta em
ShippingOption.

Configuração (settings.SHIPPING):
- melhor_envio_token: Token Bearer
- melhor_envio_url: Endpoint /api/v2/me/shipment/calculate
- api_timeout: Timeout em segundos
- origin_cep: CEP de origem do envio

Falhas de rede, HTTP != 2xx, JSON inválido ou serviço malformado
viram InfrastructureError, permitindo que FallbackRateTable recorra
à tabela regional.
"""

from dataclasses import replace
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional
import logging

import requests

from src.core.shared.exceptions import InfrastructureError
from src.core.shipping.entities import Cep, Pacote, ShippingOption

logger = logging.getLogger(__name__)


MELHOR_ENVIO_PRODUCAO_URL = "https://www.melhorenvio.com.br/api/v2/me/shipment/calculate"
MELHOR_ENVIO_SANDBOX_URL = "https://sandbox.melhorenvio.com.br/api/v2/me/shipment/calculate"


class MelhorEnvioRateTable:
    """
    Tabela de frete via API Melhor Envio.

    Example:
        tabela = MelhorEnvioRateTable(
            token="...",
            url=MELHOR_ENVIO_SANDBOX_URL,
            origem_cep="01310100",
        )
        opcoes = tabela.quote(pacote, Cep.parse("20040-020"))
    """

    SOURCE = "melhor_envio"

    def __init__(
        self,
        token: str,
        origem_cep: str,
        url: str = MELHOR_ENVIO_SANDBOX_URL,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self.token = token
        self.origem = Cep.from_normalized(origem_cep)
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()

    def _headers(self) -> Dict[str, str]:
        return {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.token}",
        }

    def _payload(self, pacote: Pacote, destino: Cep) -> Dict[str, Any]:
        return {
            "from": {"postal_code": self.origem.digitos},
            "to": {"postal_code": destino.digitos},
            "package": {
                "weight": float(pacote.peso_kg),
                "width": pacote.largura_cm,
                "height": pacote.altura_cm,
                "length": pacote.comprimento_cm,
            },
        }

    def quote(self, pacote: Pacote, destino: Cep) -> List[ShippingOption]:
        """
        Cota o pacote na API.

        Raises:
            InfrastructureError: Falha de rede, HTTP ou resposta inválida
        """
        try:
            response = self.session.post(
                self.url,
                json=self._payload(pacote, destino),
                headers=self._headers(),
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.RequestException as e:
            logger.error(f"Melhor Envio indisponível: {e}")
            raise InfrastructureError(
                f"Melhor Envio API error: {e}",
                source=self.SOURCE,
            ) from e
        except ValueError as e:
            logger.error(f"Resposta inválida do Melhor Envio: {e}")
            raise InfrastructureError(
                "Resposta inválida do Melhor Envio",
                source=self.SOURCE,
            ) from e

        if not isinstance(data, list):
            raise InfrastructureError(
                "Resposta inesperada do Melhor Envio",
                source=self.SOURCE,
            )

        opcoes = []
        for item in data:
            if not isinstance(item, dict):
                logger.warning(f"Serviço do Melhor Envio ignorado (formato inesperado): {item!r}")
                continue
            try:
                opcao = self._to_option(item)
            except (AttributeError, TypeError, ValueError, InvalidOperation) as e:
                logger.error(f"Serviço malformado no Melhor Envio: {item!r}")
                raise InfrastructureError(
                    f"Serviço malformado no Melhor Envio: {e}",
                    source=self.SOURCE,
                ) from e
            if opcao is not None:
                opcoes.append(opcao)

        opcoes.sort(key=ShippingOption.chave_ordenacao)
        if opcoes:
            opcoes[0] = replace(opcoes[0], recomendado=True)

        logger.debug(f"Melhor Envio retornou {len(opcoes)} opções para {destino.formatado}")
        return opcoes

    @staticmethod
    def _to_option(item: Dict[str, Any]) -> Optional[ShippingOption]:
        """
        Converte um serviço da resposta em ShippingOption.

        Serviços com erro, sem preço finito e positivo ou sem prazo são
        ignorados.
        """
        if item.get("error"):
            return None

        try:
            preco = Decimal(str(item.get("custom_price") or item.get("price")))
        except (InvalidOperation, TypeError):
            return None
        if not preco.is_finite() or preco <= 0:
            return None

        faixa = item.get("delivery_range") or {}
        prazo_max = faixa.get("max") or item.get("delivery_time")
        if isinstance(prazo_max, bool) or not isinstance(prazo_max, int) or prazo_max <= 0:
            return None
        prazo_min = faixa.get("min") or prazo_max

        transportadora = (item.get("company") or {}).get("name", "")
        return ShippingOption(
            id=f"melhor_envio_{item.get('id')}",
            transportadora=transportadora,
            servico=item.get("name", ""),
            preco=preco,
            prazo_dias=prazo_max,
            prazo_descricao=f"{prazo_min} a {prazo_max} dias úteis",
        )
