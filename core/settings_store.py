# ghost/core/settings_store.py
"""
Persistent key/value bot state (e.g. the verification message id).
"""
from typing import Optional

from core.db import dialect_insert, get_db_session_ctx
from models.setting import Setting

VERIFY_MESSAGE_ID = "verify_message_id"


def get_setting(key: str) -> Optional[str]:
    with get_db_session_ctx() as session:
        return session.query(Setting.value).filter(Setting.key == key).scalar()


def set_setting(key: str, value: str) -> None:
    with get_db_session_ctx() as session:
        stmt = dialect_insert(session, Setting).values(key=key, value=value)
        stmt = stmt.on_conflict_do_update(
            index_elements=[Setting.key],
            set_={"value": stmt.excluded.value},
        )
        session.execute(stmt)
