# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

from __future__ import annotations

import logging
from typing import Dict, FrozenSet, List

import bcrypt
from sqlalchemy import delete, insert, select
from sqlalchemy.orm import Session

from campbook.domain import models

logger = logging.getLogger(__name__)


DEMO_USERS = (
    {"email": "demo@user.demo", "username": "Demo", "password": "password"},
    {"email": "user1@user.com", "username": "FakeUser1", "password": "password2"},
)

DEMO_USERNAMES: FrozenSet[str] = frozenset(u["username"] for u in DEMO_USERS)


def hash_password(plain_password: str) -> str:
    """密码转 bcrypt 哈希"""
    return bcrypt.hashpw(
        plain_password.encode("utf-8"),
        bcrypt.gensalt(),
    ).decode("utf-8")


class DemoUserSeeder:
    """演示账号：apply 插入两条，revert 按 username 删除

    apply 不幂等，重复执行会触发唯一约束（IntegrityError）。
    """

    name = "demo-user"

    def rows(self) -> List[Dict[str, str]]:
        rows: List[Dict[str, str]] = []
        for item in DEMO_USERS:
            row = {
                "email": item["email"],
                "username": item["username"],
                "hashed_password": hash_password(item["password"]),
            }
            # 只校验数据本身，插入走批量语句
            models.User(**row).validate()
            rows.append(row)
        return rows

    def apply(self, db: Session) -> int:
        rows = self.rows()
        try:
            db.execute(insert(models.User), rows)
            db.commit()
        except Exception:
            db.rollback()
            raise
        logger.info("seeder %s applied: %d rows", self.name, len(rows))
        return len(rows)

    def revert(self, db: Session) -> int:
        demo_ids = select(models.User.id).where(models.User.username.in_(sorted(DEMO_USERNAMES)))
        try:
            # 批量 delete 不走 ORM cascade，先删预订
            db.execute(
                delete(models.Booking)
                .where(models.Booking.user_id.in_(demo_ids))
                .execution_options(synchronize_session="fetch")
            )
            result = db.execute(
                delete(models.User).where(models.User.username.in_(sorted(DEMO_USERNAMES)))
            )
            db.commit()
        except Exception:
            db.rollback()
            raise
        deleted = int(result.rowcount or 0)
        logger.info("seeder %s reverted: %d rows", self.name, deleted)
        return deleted
