class CourierRiskError(Exception):
    """Erro base do verificador de risco."""


class ValidationError(CourierRiskError):
    """Entrada rejeitada antes de chegar ao repositório."""

    def __init__(self, message: str, code: str = "invalid_request") -> None:
        super().__init__(message)
        self.code = code


class StorageError(CourierRiskError):
    """Falha na camada de persistência."""


class AdapterError(CourierRiskError):
    def __init__(self, provider: str, message: str) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.message = message
