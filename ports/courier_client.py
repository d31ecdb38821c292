from typing import Optional

from application.dto.courier_dto import CourierMetricsDTO

class CourierAdapterPort:
    def fetch(self, phone: str) -> Optional[CourierMetricsDTO]:
        """
        Consulta o histórico de entregas de um telefone já normalizado.
        Falhas do provedor devem ser levantadas como AdapterError.
        """
        raise NotImplementedError
