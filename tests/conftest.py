# Shared pytest fixtures
from __future__ import annotations
import tempfile
from pathlib import Path
import pytest

from data_alchemist.logging.init import reset_logging

CLIENTS_CSV = """ClientID,ClientName,PriorityLevel,RequestedTaskIDs,GroupTag,AttributesJSON
C1,Acme,3,"T1,T2",GroupA,"{""tier"": ""gold""}"
C2,Globex,5,"T1,T2,T3",GroupB,{}
C3,Initech,3,T4,GroupA,
"""

WORKERS_CSV = """WorkerID,WorkerName,Skills,AvailableSlots,MaxLoadPerPhase,WorkerGroup,QualificationLevel
W1,Alice,"python,sql","[1,2,3]",2,GroupA,4
W2,Bob,java,"[2,4]",3,GroupB,3
"""

TASKS_CSV = """TaskID,TaskName,Category,Duration,RequiredSkills,PreferredPhases,MaxConcurrent
T1,Ingest,ETL,2,python,"[1,2]",1
T2,Report,BI,1,sql,1-3,2
T3,Deploy,Ops,3,java,[3],1
"""


@pytest.fixture(autouse=True)
def _fresh_logging():
    # StreamHandler は setup 時点の sys.stdout を掴むため毎回作り直す
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        monkeypatch.chdir(p)
        monkeypatch.delenv("DATA_ALCHEMIST_CONFIG", raising=False)
        yield p


@pytest.fixture()
def clients_csv(temp_workdir: Path) -> Path:
    f = temp_workdir / "data" / "clients.csv"
    f.write_text(CLIENTS_CSV, encoding="utf-8")
    return f


@pytest.fixture()
def workers_csv(temp_workdir: Path) -> Path:
    f = temp_workdir / "data" / "workers.csv"
    f.write_text(WORKERS_CSV, encoding="utf-8")
    return f


@pytest.fixture()
def tasks_csv(temp_workdir: Path) -> Path:
    f = temp_workdir / "data" / "tasks.csv"
    f.write_text(TASKS_CSV, encoding="utf-8")
    return f


@pytest.fixture()
def sample_files(clients_csv: Path, workers_csv: Path, tasks_csv: Path) -> dict[str, Path]:
    return {"clients": clients_csv, "workers": workers_csv, "tasks": tasks_csv}


@pytest.fixture()
def write_config(temp_workdir: Path):
    def _write(text: str, name: str = "alchemist.yml") -> Path:
        cfg = temp_workdir / "config" / name
        cfg.write_text(text, encoding="utf-8")
        return cfg
    return _write
