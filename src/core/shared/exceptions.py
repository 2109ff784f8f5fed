"""
Exceções de Domínio da Loja.

Este módulo define exceções específicas do domínio que permitem
comunicar erros de forma clara e tipada entre as camadas.

Hierarquia:
    DomainException (base)
    ├── ValidationError (entrada inválida → 400)
    ├── EntityNotFoundError (referência inexistente → 404)
    ├── BusinessRuleViolationError (regra de negócio violada → 422)
    │   └── NoShippingOptionsError (nenhuma transportadora atende)
    ├── AuthorizationError (sem sessão / sem permissão → 401/403)
    └── InfrastructureError (colaborador indisponível → 500)
"""


class DomainException(Exception):
    """
    Exceção base para todos os erros de domínio.

    Todas as exceções específicas do domínio devem herdar desta classe.
    Isso permite capturar qualquer erro de domínio de forma genérica.

    Example:
        try:
            perfil.atualizar(peso_kg=Decimal("45"))
        except DomainException as e:
            logger.error(f"Erro de domínio: {e}")
    """

    def __init__(self, message: str, code: str = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> dict:
        """Serializa exceção para dicionário (útil para APIs)."""
        return {
            "error": self.code,
            "message": self.message,
        }


class ValidationError(DomainException):
    """
    Erro de validação de dados de entrada.

    Lançada quando dados fornecidos não atendem aos requisitos
    mínimos para processamento (CEP malformado, origem da carga
    ausente, dimensões fora dos limites).

    Example:
        if not CEP_NORMALIZADO.fullmatch(valor):
            raise ValidationError("CEP inválido", field="cep")
    """

    def __init__(self, message: str, field: str = None):
        self.field = field
        code = f"VALIDATION_ERROR_{field.upper()}" if field else "VALIDATION_ERROR"
        super().__init__(message, code)

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.field:
            result["field"] = self.field
        return result


class EntityNotFoundError(DomainException):
    """
    Entidade não encontrada no repositório.

    Lançada quando uma busca por ID não retorna resultado, ou quando
    a referência existe mas está inativa para cotação.

    Example:
        perfil = repo.get_by_id(perfil_id)
        if not perfil:
            raise EntityNotFoundError(f"Perfil de frete {perfil_id} não encontrado")
    """

    def __init__(self, message: str, entity_type: str = None, entity_id: str = None):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(message, "ENTITY_NOT_FOUND")

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.entity_type:
            result["entity_type"] = self.entity_type
        if self.entity_id:
            result["entity_id"] = self.entity_id
        return result


class BusinessRuleViolationError(DomainException):
    """
    Violação de regra de negócio.

    Lançada quando uma operação viola uma regra de negócio
    estabelecida no domínio.

    Example:
        if total_produtos or total_planos:
            raise BusinessRuleViolationError(
                "Não é possível excluir o perfil em uso",
                rule="perfil_em_uso"
            )
    """

    def __init__(self, message: str, rule: str = None):
        self.rule = rule
        super().__init__(message, "BUSINESS_RULE_VIOLATION")

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.rule:
            result["rule"] = self.rule
        return result


class NoShippingOptionsError(BusinessRuleViolationError):
    """
    Nenhuma opção de frete pode ser oferecida.

    Lançada quando nenhuma transportadora atende a carga calculada
    ou a região de destino.
    """

    def __init__(self, message: str = "Nenhuma opção de frete disponível para este CEP"):
        super().__init__(message, rule="sem_opcoes_de_frete")
        self.code = "NO_OPTIONS_AVAILABLE"


class AuthorizationError(DomainException):
    """
    Acesso negado a uma operação administrativa.

    Attributes:
        authenticated: False quando não há sessão (401),
            True quando há sessão sem permissão (403)
    """

    def __init__(self, message: str, authenticated: bool = False):
        self.authenticated = authenticated
        super().__init__(message, "FORBIDDEN" if authenticated else "UNAUTHORIZED")


class InfrastructureError(DomainException):
    """
    Falha de um colaborador externo (tabela de fretes, repositório).

    A mensagem é destinada aos logs; a camada HTTP responde com
    uma mensagem genérica sem vazar detalhes internos.

    Example:
        try:
            response = session.post(url, json=payload, timeout=timeout)
        except requests.RequestException as e:
            raise InfrastructureError(f"Melhor Envio indisponível: {e}", source="melhor_envio")
    """

    def __init__(self, message: str, source: str = None):
        self.source = source
        super().__init__(message, "INTERNAL_ERROR")

    def to_dict(self) -> dict:
        return {
            "error": self.code,
            "message": "Erro interno do servidor",
        }
