from collections.abc import Generator
from functools import lru_cache

from fastapi import Depends
from sqlalchemy.orm import Session, sessionmaker

from equipmaint.inventory.spare_parts import SparePartLedger
from equipmaint.maintenance.pm_generator import PMGenerator
from equipmaint.maintenance.schedules import PMScheduleStore
from equipmaint.maintenance.work_orders import WorkOrderEngine
from equipmaint.models.database import get_engine, get_session_factory


@lru_cache
def _session_factory() -> sessionmaker[Session]:
    return get_session_factory(get_engine())


def get_db() -> Generator[Session, None, None]:
    """One session per request, committed only if the handler succeeds."""
    session = _session_factory()()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def get_ledger(session: Session = Depends(get_db)) -> SparePartLedger:
    return SparePartLedger(session)


def get_work_order_engine(
    ledger: SparePartLedger = Depends(get_ledger),
) -> WorkOrderEngine:
    return WorkOrderEngine(ledger.session, ledger)


def get_schedule_store(session: Session = Depends(get_db)) -> PMScheduleStore:
    return PMScheduleStore(session)


def get_pm_generator(
    engine: WorkOrderEngine = Depends(get_work_order_engine),
) -> PMGenerator:
    return PMGenerator(engine.session, engine)
