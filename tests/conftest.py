import random

import pytest

from synquiz import database
from synquiz.config import settings
from synquiz.models import WordEntry


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


LEVEL_ONE_CSV = """id,headword,synonyms,active
1,etxe,bizileku|egoitza,1
2,ikasten,ikasi|ikastea,1
3,mendiak,menditzarrak,1
4,askatasun,libertate,1
5,ederra,polita|dotorea,1
6,azkar,bizkor|arin,1
7,jaten,elikatzen,1
8,ibili,oinez joan,1
9,lagun,adiskide,1
10,ura,edari,1
11,zaharra,adinekoa,1
12,handia,ikaragarria,1
13,txikia,ttipia,0
"""


@pytest.fixture()
def rng():
    return random.Random(1234)


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def db(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "DB_DIR", str(tmp_path / "db"))
    database.init_db()
    return tmp_path / "db"


@pytest.fixture()
def vocab_dir(tmp_path):
    directory = tmp_path / "vocabulary"
    directory.mkdir()
    (directory / "1.csv").write_text(LEVEL_ONE_CSV, encoding="utf-8")
    return directory


@pytest.fixture()
def words():
    return [
        WordEntry(id=i, headword=headword, synonyms=synonyms)
        for i, (headword, synonyms) in enumerate(
            [
                ("etxe", ["bizileku", "egoitza"]),
                ("ikasten", ["ikasi"]),
                ("mendiak", ["menditzarrak"]),
                ("askatasun", ["libertate"]),
                ("ederra", ["polita", "dotorea"]),
                ("azkar", ["bizkor", "arin"]),
                ("lagun", ["adiskide"]),
                ("handia", ["ikaragarria"]),
            ],
            start=1,
        )
    ]
