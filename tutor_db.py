"""
學習數據存儲模塊
用戶、課程、成就及學習進度保存在單個 JSON 文件中 (默認 data/tutor_db.json)
"""
import json
import os
import threading
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import global_data

logger = logging.getLogger(__name__)

_LOCK = threading.RLock()

DEFAULT_LEVEL = "Iniciante"

_SEED_LESSONS = [
    {"id": 1, "title": "Básico 1", "is_locked": False},
    {"id": 2, "title": "Saudações", "is_locked": True},
    {"id": 3, "title": "Família", "is_locked": True},
    {"id": 4, "title": "Números", "is_locked": True},
]

_SEED_ACHIEVEMENTS = [
    {"id": 1, "title": "Primeira Lição", "icon": "🎯"},
    {"id": 2, "title": "Sequência de 3", "icon": "🔥"},
    {"id": 3, "title": "Estudioso", "icon": "📚"},
    {"id": 4, "title": "Campeão", "icon": "👑"},
]


class DuplicateEmail(Exception):
    """註冊時郵箱已存在"""


def _db_path() -> str:
    """返回有效的數據文件路徑，優先 ENV TUTOR_DB_PATH，其次 global_data.TUTOR_DB_FILE。"""
    env_path = os.environ.get("TUTOR_DB_PATH")
    if env_path and str(env_path).strip():
        return str(env_path)
    return str(global_data.TUTOR_DB_FILE)


def _empty_db() -> Dict[str, Any]:
    return {
        "next_user_id": 1,
        "users": [],
        "lessons": [dict(l) for l in _SEED_LESSONS],
        "achievements": [dict(a) for a in _SEED_ACHIEVEMENTS],
        "user_lessons": [],
        "user_achievements": [],
    }


def _write(db: Dict[str, Any]) -> None:
    path = _db_path()
    tmp = path + ".tmp"
    with open(tmp, "w", encoding="utf-8") as f:
        json.dump(db, f, ensure_ascii=False, indent=2)
        f.write("\n")
    os.replace(tmp, path)


def ensure_db() -> str:
    """確保數據文件存在，不存在則寫入種子數據。返回文件路徑。"""
    path = _db_path()
    with _LOCK:
        if not os.path.exists(path):
            os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
            _write(_empty_db())
            logger.info(f"已創建學習數據文件: {path}")
    return path


def _load() -> Dict[str, Any]:
    ensure_db()
    with open(_db_path(), "r", encoding="utf-8") as f:
        db = json.load(f)
    if not isinstance(db, dict):
        raise ValueError(f"學習數據文件根節點不是對象: {_db_path()}")
    # 類型規整
    template = _empty_db()
    for key, default in template.items():
        if not isinstance(db.get(key), type(default)):
            db[key] = default
    return db


def find_user_by_email(email: str) -> Optional[Dict[str, Any]]:
    """通過郵箱查找用戶 (不區分大小寫)。"""
    if not email:
        return None
    wanted = email.strip().lower()
    with _LOCK:
        for u in _load()["users"]:
            if isinstance(u, dict) and str(u.get("email", "")).lower() == wanted:
                return u
    return None


def find_user_by_id(user_id: Any) -> Optional[Dict[str, Any]]:
    """通過 ID 查找用戶，ID 以字符串形式比較。"""
    if user_id is None or str(user_id) == "":
        return None
    wanted = str(user_id)
    with _LOCK:
        for u in _load()["users"]:
            if isinstance(u, dict) and str(u.get("id")) == wanted:
                return u
    return None


def create_user(name: str, email: str, password_hash: str) -> Dict[str, Any]:
    """
    新建用戶並返回完整記錄。

    Raises:
        DuplicateEmail: 郵箱已被註冊
    """
    with _LOCK:
        db = _load()
        wanted = email.strip().lower()
        if any(isinstance(u, dict) and str(u.get("email", "")).lower() == wanted for u in db["users"]):
            raise DuplicateEmail(email)

        existing_ids = [int(u["id"]) for u in db["users"] if isinstance(u, dict) and str(u.get("id", "")).isdigit()]
        user_id = max([int(db["next_user_id"])] + [i + 1 for i in existing_ids])
        user = {
            "id": user_id,
            "name": name,
            "email": email,
            "password_hash": password_hash,
            "avatar": None,
            "level": DEFAULT_LEVEL,
            "xp": 0,
            "streak": 0,
            "join_date": datetime.now(timezone.utc).date().isoformat(),
        }
        db["users"].append(user)
        db["next_user_id"] = user_id + 1
        _write(db)
    logger.info(f"已創建用戶: id={user_id}")
    return user


def get_lessons_for_user(user_id: Any) -> List[Dict[str, Any]]:
    """返回全部課程及該用戶的學習進度，按課程 ID 升序。"""
    wanted = str(user_id)
    with _LOCK:
        db = _load()
    progress_map = {
        p.get("lesson_id"): p
        for p in db["user_lessons"]
        if isinstance(p, dict) and str(p.get("user_id")) == wanted
    }
    lessons = []
    for lesson in sorted(db["lessons"], key=lambda l: int(l.get("id", 0))):
        p = progress_map.get(lesson.get("id"))
        lessons.append({
            "id": int(lesson["id"]),
            "title": lesson.get("title"),
            "progress": int(p.get("progress", 0)) if p else 0,
            "completed": bool(p.get("completed")) if p else False,
            "locked": bool(lesson.get("is_locked")),
        })
    return lessons


def get_achievements_for_user(user_id: Any) -> List[Dict[str, Any]]:
    """返回全部成就，並標記該用戶是否已解鎖。"""
    wanted = str(user_id)
    with _LOCK:
        db = _load()
    unlocked = {
        a.get("achievement_id")
        for a in db["user_achievements"]
        if isinstance(a, dict) and str(a.get("user_id")) == wanted
    }
    return [
        {
            "id": int(a["id"]),
            "title": a.get("title"),
            "icon": a.get("icon"),
            "unlocked": a.get("id") in unlocked,
        }
        for a in sorted(db["achievements"], key=lambda a: int(a.get("id", 0)))
    ]


def public_user(user: Dict[str, Any]) -> Dict[str, Any]:
    """響應中的用戶對象 (不含密碼哈希)。"""
    return {
        "id": str(user["id"]),
        "name": user.get("name"),
        "email": user.get("email"),
        "avatar": user.get("avatar"),
        "level": user.get("level"),
        "xp": int(user.get("xp") or 0),
        "streak": int(user.get("streak") or 0),
        "joinDate": user.get("join_date"),
    }
