from datetime import datetime, timezone
from typing import Optional

import structlog

from application.dto.courier_dto import CourierMetricsDTO
from ports.courier_client import CourierAdapterPort

logger = structlog.get_logger(__name__)


class MockCourierAdapter(CourierAdapterPort):
    """
    Provedor sintético com dados determinísticos.
    Usado em demonstrações e testes antes das APIs reais.
    """

    SLUG = "mock"

    def fetch(self, phone: str) -> Optional[CourierMetricsDTO]:
        logger.debug("mock_adapter.fetch", phone=phone)
        return CourierMetricsDTO(
            phone=phone,
            courier=self.SLUG,
            delivered=3,
            returned=1,
            cancelled=0,
            updated_at=datetime.now(timezone.utc),
        )
