from __future__ import annotations

import sys
from pathlib import Path
from typing import Iterator

import pytest
from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from qrmenu.infrastructure.db.models import counter, menu, order  # noqa: F401
from qrmenu.infrastructure.db.models.base import Base
from qrmenu.infrastructure.db.models.menu import RestaurantModel


@pytest.fixture
def engine(tmp_path: Path) -> Iterator[Engine]:
    sqlite_engine = create_engine(f"sqlite:///{tmp_path / 'qrmenu.db'}")
    Base.metadata.create_all(sqlite_engine)
    with Session(sqlite_engine) as session:
        session.add(RestaurantModel(id="demo-bistro", name="Demo Bistro"))
        session.add(RestaurantModel(id="other-place", name="Other Place"))
        session.commit()
    yield sqlite_engine
    sqlite_engine.dispose()
