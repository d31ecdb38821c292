from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Iterator, List, Optional

import structlog
from sqlalchemy import (
    JSON, BigInteger, Column, DateTime, Float, Integer, String,
    UniqueConstraint, cast, create_engine, delete, distinct, func, select,
)
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from config.settings import TABLE_PREFIX
from domain.errors import StorageError, ValidationError
from domain.model.metrics import (
    GlobalSummary, MetricRecord, PhoneSummary, ProviderBreakdown,
)
from domain.service.risk import (
    coerce_counter, compute_ratios, normalize_phone, require_phone,
)
from ports.persistence import MetricsRepositoryPort, SettingsRepositoryPort

logger = structlog.get_logger(__name__)
Base = declarative_base()

# BIGINT não é autoincremento no SQLite
_ID_TYPE = BigInteger().with_variant(Integer, "sqlite")


class MetricORM(Base):
    __tablename__ = f"{TABLE_PREFIX}vw_fraud_data"
    id = Column(_ID_TYPE, primary_key=True, autoincrement=True)
    phone = Column(String(20), nullable=False, index=True)
    courier = Column(String(50), nullable=False, index=True)

    delivered = Column(Integer, nullable=False, default=0)
    returned = Column(Integer, nullable=False, default=0)
    cancelled = Column(Integer, nullable=False, default=0)

    # derivados, sempre arredondados a 4 casas
    complete_ratio = Column(Float, nullable=False, default=0.0)
    cancel_ratio = Column(Float, nullable=False, default=0.0)

    updated_at = Column(DateTime(timezone=True), nullable=False, index=True)

    __table_args__ = (
        UniqueConstraint("phone", "courier", name="uix_phone_courier"),
    )


class OptionORM(Base):
    __tablename__ = f"{TABLE_PREFIX}vw_fraud_options"
    key = Column(String(191), primary_key=True)
    value = Column(JSON, nullable=True)


def _utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _coerce_timestamp(value: Any) -> datetime:
    if value in (None, ""):
        return datetime.now(timezone.utc)
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.strip())
        except ValueError:
            raise ValidationError(f"invalid updated_at: {value!r}") from None
    return _utc(value)


def _sum(column):
    return func.coalesce(func.sum(column), 0)


class SqlMetricsRepository(MetricsRepositoryPort, SettingsRepositoryPort):
    def __init__(self, db_url: str, create_tables: bool = True):
        connect_args = {}
        if db_url.startswith("sqlite"):
            connect_args = {"check_same_thread": False, "timeout": 30}
        self.engine = create_engine(db_url, connect_args=connect_args)
        self.Session = sessionmaker(bind=self.engine, expire_on_commit=False)
        if create_tables:
            self.create_tables()

    # ------------------------------------------------------------------ #
    #  Ciclo de vida                                                     #
    # ------------------------------------------------------------------ #
    def create_tables(self) -> None:
        try:
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as exc:
            logger.exception("metrics_repo.create_tables.error")
            raise StorageError("could not create tables") from exc
        logger.info("metrics_repo.create_tables.success")

    def drop_tables(self) -> None:
        try:
            Base.metadata.drop_all(self.engine)
        except SQLAlchemyError as exc:
            logger.exception("metrics_repo.drop_tables.error")
            raise StorageError("could not drop tables") from exc
        logger.info("metrics_repo.drop_tables.success")

    # ------------------------------------------------------------------ #
    #  Escrita                                                           #
    # ------------------------------------------------------------------ #
    def upsert(
        self,
        phone: str,
        courier: str,
        delivered: int,
        returned: int,
        cancelled: int,
        updated_at: Optional[datetime] = None,
    ) -> MetricRecord:
        phone = require_phone(phone)
        courier = (courier or "").strip()
        if not courier:
            raise ValidationError("courier is required")
        delivered = coerce_counter("delivered", delivered)
        returned = coerce_counter("returned", returned)
        cancelled = coerce_counter("cancelled", cancelled)

        ratios = compute_ratios(delivered, returned, cancelled)
        values = {
            "phone": phone,
            "courier": courier,
            "delivered": delivered,
            "returned": returned,
            "cancelled": cancelled,
            "complete_ratio": ratios.completion_ratio,
            "cancel_ratio": ratios.cancel_ratio,
            "updated_at": _coerce_timestamp(updated_at),
        }

        log = logger.bind(phone=phone, courier=courier)
        insert_stmt = self._insert()(MetricORM).values(**values)
        stmt = insert_stmt.on_conflict_do_update(
            index_elements=["phone", "courier"],
            set_={
                name: insert_stmt.excluded[name]
                for name in values
                if name not in ("phone", "courier")
            },
        )

        with self._session("metrics_repo.upsert", log) as session:
            session.execute(stmt)
            row = session.execute(
                select(MetricORM).where(MetricORM.phone == phone, MetricORM.courier == courier)
            ).scalar_one()
            record = self._to_record(row)

        log.info("metrics_repo.upsert.success", id=record.id, total=ratios.total)
        return record

    def delete(self, record_id: int) -> bool:
        try:
            record_id = int(record_id)
        except (TypeError, ValueError):
            return False
        if record_id <= 0:
            return False

        log = logger.bind(id=record_id)
        with self._session("metrics_repo.delete", log) as session:
            result = session.execute(delete(MetricORM).where(MetricORM.id == record_id))
            deleted = result.rowcount > 0
        log.info("metrics_repo.delete.success", deleted=deleted)
        return deleted

    # ------------------------------------------------------------------ #
    #  Leitura                                                           #
    # ------------------------------------------------------------------ #
    def get_by_phone(self, phone: str) -> Optional[PhoneSummary]:
        phone = normalize_phone(phone)
        stmt = select(
            func.count(MetricORM.id),
            _sum(MetricORM.delivered),
            _sum(MetricORM.returned),
            _sum(MetricORM.cancelled),
            func.max(MetricORM.updated_at),
        ).where(MetricORM.phone == phone)

        with self._session("metrics_repo.get_by_phone", logger.bind(phone=phone)) as session:
            rows, delivered, returned, cancelled, updated_at = session.execute(stmt).one()

        if not rows:
            return None
        return self._phone_summary(phone, delivered, returned, cancelled, updated_at)

    def get_by_phone_per_provider(self, phone: str) -> List[MetricRecord]:
        phone = normalize_phone(phone)
        stmt = (
            select(MetricORM)
            .where(MetricORM.phone == phone)
            .order_by(MetricORM.updated_at.desc(), MetricORM.id.desc())
        )
        with self._session("metrics_repo.get_by_phone_per_provider", logger.bind(phone=phone)) as session:
            return [self._to_record(r) for r in session.execute(stmt).scalars()]

    def get_summary(self) -> GlobalSummary:
        stmt = select(
            func.count(distinct(MetricORM.phone)),
            _sum(MetricORM.delivered),
            _sum(MetricORM.returned),
            _sum(MetricORM.cancelled),
        )
        with self._session("metrics_repo.get_summary", logger) as session:
            customers, delivered, returned, cancelled = session.execute(stmt).one()

        delivered, returned, cancelled = int(delivered), int(returned), int(cancelled)
        ratios = compute_ratios(delivered, returned, cancelled)
        return GlobalSummary(
            customers=int(customers or 0),
            delivered=delivered,
            returned=returned,
            cancelled=cancelled,
            total_orders=ratios.total,
            completion_ratio=ratios.completion_ratio,
            cancel_ratio=ratios.cancel_ratio,
            risk_ratio=ratios.risk_ratio,
        )

    def get_provider_breakdown(self) -> List[ProviderBreakdown]:
        stmt = (
            select(
                MetricORM.courier,
                func.count(distinct(MetricORM.phone)),
                _sum(MetricORM.delivered),
                _sum(MetricORM.returned),
                _sum(MetricORM.cancelled),
                func.max(MetricORM.updated_at),
            )
            .group_by(MetricORM.courier)
            .order_by(MetricORM.courier.asc())
        )
        with self._session("metrics_repo.get_provider_breakdown", logger) as session:
            rows = session.execute(stmt).all()

        breakdown = []
        for courier, customers, delivered, returned, cancelled, updated_at in rows:
            delivered, returned, cancelled = int(delivered), int(returned), int(cancelled)
            ratios = compute_ratios(delivered, returned, cancelled)
            breakdown.append(
                ProviderBreakdown(
                    courier=courier,
                    customers=int(customers),
                    delivered=delivered,
                    returned=returned,
                    cancelled=cancelled,
                    updated_at=_utc(updated_at),
                    total_orders=ratios.total,
                    completion_ratio=ratios.completion_ratio,
                    cancel_ratio=ratios.cancel_ratio,
                    risk_ratio=ratios.risk_ratio,
                )
            )
        return breakdown

    def get_top_risk(self, limit: int = 5) -> List[PhoneSummary]:
        limit = max(1, int(limit))
        total = func.sum(MetricORM.delivered + MetricORM.returned + MetricORM.cancelled)
        risky = func.sum(MetricORM.returned + MetricORM.cancelled)
        risk = cast(risky, Float) / cast(total, Float)

        stmt = (
            select(
                MetricORM.phone,
                _sum(MetricORM.delivered),
                _sum(MetricORM.returned),
                _sum(MetricORM.cancelled),
                func.max(MetricORM.updated_at),
            )
            .group_by(MetricORM.phone)
            .having(total > 0)
            .order_by(risk.desc(), total.desc(), MetricORM.phone.asc())
            .limit(limit)
        )
        with self._session("metrics_repo.get_top_risk", logger.bind(limit=limit)) as session:
            rows = session.execute(stmt).all()

        return [self._phone_summary(*row) for row in rows]

    def get_recent(self, limit: int = 5) -> List[MetricRecord]:
        limit = max(1, int(limit))
        stmt = (
            select(MetricORM)
            .order_by(MetricORM.updated_at.desc(), MetricORM.id.desc())
            .limit(limit)
        )
        with self._session("metrics_repo.get_recent", logger.bind(limit=limit)) as session:
            return [self._to_record(r) for r in session.execute(stmt).scalars()]

    def list_phones(self) -> List[str]:
        stmt = select(distinct(MetricORM.phone)).order_by(MetricORM.phone)
        with self._session("metrics_repo.list_phones", logger) as session:
            return list(session.execute(stmt).scalars())

    # ------------------------------------------------------------------ #
    #  Opções (configuração dos provedores)                              #
    # ------------------------------------------------------------------ #
    def get_option(self, key: str, default: Any = None) -> Any:
        with self._session("options_repo.get", logger.bind(key=key)) as session:
            row = session.get(OptionORM, key)
            return default if row is None or row.value is None else row.value

    def set_option(self, key: str, value: Any) -> None:
        log = logger.bind(key=key)
        insert_stmt = self._insert()(OptionORM).values(key=key, value=value)
        stmt = insert_stmt.on_conflict_do_update(
            index_elements=["key"], set_={"value": insert_stmt.excluded["value"]}
        )
        with self._session("options_repo.set", log) as session:
            session.execute(stmt)
        log.info("options_repo.set.success")

    def delete_option(self, key: str) -> None:
        with self._session("options_repo.delete", logger.bind(key=key)) as session:
            session.execute(delete(OptionORM).where(OptionORM.key == key))

    # ------------------------------------------------------------------ #
    #  Helpers                                                           #
    # ------------------------------------------------------------------ #
    @contextmanager
    def _session(self, event: str, log) -> Iterator[Session]:
        session = self.Session()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            log.exception(f"{event}.error")
            raise StorageError(f"{event} failed: {exc.__class__.__name__}") from exc
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def _insert(self):
        dialect = self.engine.dialect.name
        if dialect == "postgresql":
            return pg_insert
        if dialect == "sqlite":
            return sqlite_insert
        raise StorageError(f"unsupported database dialect: {dialect}")

    @staticmethod
    def _to_record(row: MetricORM) -> MetricRecord:
        return MetricRecord(
            id=row.id,
            phone=row.phone,
            courier=row.courier,
            delivered=row.delivered,
            returned=row.returned,
            cancelled=row.cancelled,
            complete_ratio=row.complete_ratio,
            cancel_ratio=row.cancel_ratio,
            updated_at=_utc(row.updated_at),
        )

    @staticmethod
    def _phone_summary(phone, delivered, returned, cancelled, updated_at) -> PhoneSummary:
        delivered, returned, cancelled = int(delivered), int(returned), int(cancelled)
        ratios = compute_ratios(delivered, returned, cancelled)
        return PhoneSummary(
            phone=phone,
            delivered=delivered,
            returned=returned,
            cancelled=cancelled,
            updated_at=_utc(updated_at),
            total_orders=ratios.total,
            completion_ratio=ratios.completion_ratio,
            cancel_ratio=ratios.cancel_ratio,
            risk_ratio=ratios.risk_ratio,
        )
