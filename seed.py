# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

"""建表 / 演示数据

    python seed.py init    # Base.metadata.create_all（本地开发用，线上走 alembic）
    python seed.py up      # 依次执行所有 seeder
    python seed.py down    # 倒序回滚
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from campbook.common.exception_handlers import classify
from campbook.common.logging import setup_logging
from campbook.domain import models  # noqa: F401
from campbook.infra.config import settings
from campbook.infra.db import Base, engine, get_session
from campbook.infra.seeders import SEEDERS

logger = logging.getLogger("campbook.seed")


def create_tables() -> List[str]:
    Base.metadata.create_all(bind=engine)
    return sorted(Base.metadata.tables)


def run(direction: str) -> int:
    seeders = [cls() for cls in SEEDERS]
    if direction == "down":
        seeders.reverse()

    db = get_session()
    try:
        for seeder in seeders:
            if direction == "up":
                count = seeder.apply(db)
            else:
                count = seeder.revert(db)
            print(f"{direction} {seeder.name}: {count} rows")
    except Exception as e:  # noqa: BLE001
        logger.debug("seed %s failed", direction, exc_info=True)
        err = classify(e)
        print(f"{err.title}: {err.message}", file=sys.stderr)
        for msg in err.errors or []:
            print(f"  - {msg}", file=sys.stderr)
        return 1
    finally:
        db.close()
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="create tables / apply / revert demo seed data")
    parser.add_argument("command", choices=["init", "up", "down"])
    args = parser.parse_args(argv)

    setup_logging(settings.LOG_LEVEL)
    if args.command == "init":
        print("tables: " + ", ".join(create_tables()))
        return 0
    return run(args.command)


if __name__ == "__main__":
    raise SystemExit(main())
