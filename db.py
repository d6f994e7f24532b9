import sqlite3
import datetime
import json
from contextlib import contextmanager
from typing import List, Tuple, Optional, Iterable

from config import YamlConfig
from settings_schema import validate_settings
from models import ExerciseCategory, FitnessGoal, PersonalRecord, UserProfile
from algorithms.math_tools import MathTools


class Database:
    """Provides SQLite connection management and schema initialization."""

    _TABLE_DEFINITIONS = {
        "personal_records": (
            """CREATE TABLE personal_records (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    exercise_name TEXT NOT NULL,
                    weight REAL NOT NULL,
                    weight_unit TEXT NOT NULL DEFAULT 'kg',
                    date TEXT NOT NULL,
                    category TEXT NOT NULL DEFAULT 'Other'
                );""",
            ["id", "exercise_name", "weight", "weight_unit", "date", "category"],
        ),
        "user_profile": (
            """CREATE TABLE user_profile (
                    id INTEGER PRIMARY KEY CHECK (id = 1),
                    gender TEXT,
                    age INTEGER,
                    weight_value REAL,
                    weight_unit TEXT,
                    skeletal_muscle_mass_value REAL,
                    skeletal_muscle_mass_unit TEXT,
                    fitness_goals TEXT NOT NULL DEFAULT '[]'
                );""",
            [
                "id",
                "gender",
                "age",
                "weight_value",
                "weight_unit",
                "skeletal_muscle_mass_value",
                "skeletal_muscle_mass_unit",
                "fitness_goals",
            ],
        ),
        "settings": (
            """CREATE TABLE settings (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                );""",
            ["key", "value"],
        ),
    }

    def __init__(self, db_path: str = "strength.db") -> None:
        self._db_path = db_path
        self._ensure_schema()
        self._init_settings()

    @contextmanager
    def _connection(self):
        connection = sqlite3.connect(self._db_path)
        try:
            yield connection
            connection.commit()
        finally:
            connection.close()

    def _ensure_schema(self) -> None:
        with self._connection() as conn:
            conn.execute("PRAGMA foreign_keys=off;")
            for table, (sql, columns) in self._TABLE_DEFINITIONS.items():
                self._ensure_table(conn, table, sql, columns)
            conn.execute("PRAGMA foreign_keys=on;")

    def _ensure_table(
        self, conn: sqlite3.Connection, table: str, sql: str, columns: List[str]
    ) -> None:
        cur = conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?;", (table,)
        )
        if cur.fetchone() is None:
            conn.execute(sql)
            return

        cur = conn.execute(f"PRAGMA table_info({table});")
        existing_cols = [row[1] for row in cur.fetchall()]
        if existing_cols == columns:
            return

        conn.execute(f"DROP TABLE IF EXISTS {table}_old;")
        conn.execute(f"ALTER TABLE {table} RENAME TO {table}_old;")
        conn.execute(sql)
        common = [c for c in existing_cols if c in columns]
        if common:
            cols = ", ".join(common)
            conn.execute(f"INSERT INTO {table} ({cols}) SELECT {cols} FROM {table}_old;")
        conn.execute(f"DROP TABLE {table}_old;")

    def _init_settings(self) -> None:
        defaults = {
            "weight_unit": "kg",
            "age_adjustment_start": "40",
            "age_adjustment_rate": "0.01",
            "llm_endpoint": "",
            "llm_primary_model": "gemini-2.5-flash-lite",
            "llm_fallback_model": "gemini-2.5-flash",
            "llm_timeout": "30",
        }
        with self._connection() as conn:
            for key, value in defaults.items():
                conn.execute(
                    "INSERT OR IGNORE INTO settings (key, value) VALUES (?, ?);",
                    (key, value),
                )


class BaseRepository(Database):
    """Base repository providing helper methods."""

    def execute(self, query: str, params: Tuple = ()) -> int:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return cursor.lastrowid

    def fetch_all(self, query: str, params: Tuple = ()) -> List[Tuple]:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return cursor.fetchall()

    def _delete_all(self, table: str) -> None:
        self.execute(f"DELETE FROM {table};")


class PersonalRecordRepository(BaseRepository):
    """Repository for personal record entries."""

    UNITS = ("kg", "lbs")

    @classmethod
    def _validate(cls, exercise_name: str, weight: float, weight_unit: str) -> None:
        if not exercise_name or not exercise_name.strip():
            raise ValueError("exercise name required")
        if not MathTools.is_valid_weight(weight):
            raise ValueError("weight must be non-negative")
        if weight_unit not in cls.UNITS:
            raise ValueError("unit must be kg or lbs")

    @staticmethod
    def _row_to_record(row: Tuple) -> PersonalRecord:
        rid, name, weight, unit, date, category = row
        return PersonalRecord(
            id=int(rid),
            exercise_name=name,
            weight=float(weight),
            weight_unit=unit,
            date=datetime.date.fromisoformat(date),
            category=category,
        )

    def add(
        self,
        exercise_name: str,
        weight: float,
        weight_unit: str = "kg",
        date: Optional[str] = None,
        category: str = ExerciseCategory.OTHER.value,
    ) -> int:
        self._validate(exercise_name, weight, weight_unit)
        ExerciseCategory(category)
        date = date or datetime.date.today().isoformat()
        datetime.date.fromisoformat(date)
        return self.execute(
            "INSERT INTO personal_records (exercise_name, weight, weight_unit, date, category) "
            "VALUES (?, ?, ?, ?, ?);",
            (exercise_name.strip(), weight, weight_unit, date, category),
        )

    def bulk_add(self, records: Iterable[PersonalRecord]) -> list[int]:
        return [
            self.add(
                r.exercise_name,
                r.weight,
                r.weight_unit,
                r.date.isoformat(),
                r.category.value,
            )
            for r in records
        ]

    def update(self, record_id: int, weight: float, date: Optional[str] = None) -> None:
        """Update the weight and optionally the date of a record."""
        rows = self.fetch_all(
            "SELECT exercise_name, weight_unit, date FROM personal_records WHERE id = ?;",
            (record_id,),
        )
        if not rows:
            raise ValueError("record not found")
        name, unit, old_date = rows[0]
        self._validate(name, weight, unit)
        if date:
            datetime.date.fromisoformat(date)
        self.execute(
            "UPDATE personal_records SET weight = ?, date = ? WHERE id = ?;",
            (weight, date or old_date, record_id),
        )

    def delete(self, record_id: int) -> None:
        rows = self.fetch_all("SELECT id FROM personal_records WHERE id = ?;", (record_id,))
        if not rows:
            raise ValueError("record not found")
        self.execute("DELETE FROM personal_records WHERE id = ?;", (record_id,))

    def delete_all(self) -> None:
        self._delete_all("personal_records")

    def fetch(self, record_id: int) -> PersonalRecord:
        rows = self.fetch_all(
            "SELECT id, exercise_name, weight, weight_unit, date, category "
            "FROM personal_records WHERE id = ?;",
            (record_id,),
        )
        if not rows:
            raise ValueError("record not found")
        return self._row_to_record(rows[0])

    def fetch_all_records(
        self, start_date: Optional[str] = None, end_date: Optional[str] = None
    ) -> list[PersonalRecord]:
        """Return records in insertion order, optionally limited by date."""
        query = (
            "SELECT id, exercise_name, weight, weight_unit, date, category "
            "FROM personal_records WHERE 1=1"
        )
        params: list[str] = []
        if start_date:
            query += " AND date >= ?"
            params.append(start_date)
        if end_date:
            query += " AND date <= ?"
            params.append(end_date)
        query += " ORDER BY id;"
        return [self._row_to_record(r) for r in self.fetch_all(query, tuple(params))]


class ProfileRepository(BaseRepository):
    """Repository holding the single user profile."""

    _FIELDS = (
        "gender",
        "age",
        "weight_value",
        "weight_unit",
        "skeletal_muscle_mass_value",
        "skeletal_muscle_mass_unit",
    )

    def fetch(self) -> UserProfile:
        rows = self.fetch_all(
            f"SELECT {', '.join(self._FIELDS)}, fitness_goals FROM user_profile WHERE id = 1;"
        )
        if not rows:
            return UserProfile()
        *values, goals = rows[0]
        data = {k: v for k, v in zip(self._FIELDS, values) if v is not None}
        data["fitness_goals"] = [FitnessGoal(**g) for g in json.loads(goals or "[]")]
        return UserProfile(**data)

    def save(self, profile: UserProfile) -> None:
        values = [getattr(profile, f) for f in self._FIELDS]
        goals = json.dumps([g.model_dump() for g in profile.fitness_goals])
        placeholders = ", ".join("?" for _ in range(len(self._FIELDS) + 1))
        updates = ", ".join(f"{f}=excluded.{f}" for f in (*self._FIELDS, "fitness_goals"))
        self.execute(
            f"INSERT INTO user_profile (id, {', '.join(self._FIELDS)}, fitness_goals) "
            f"VALUES (1, {placeholders}) ON CONFLICT(id) DO UPDATE SET {updates};",
            (*values, goals),
        )

    def update(self, **fields) -> UserProfile:
        """Merge ``fields`` into the stored profile and return the result."""
        unknown = set(fields) - set(self._FIELDS) - {"fitness_goals"}
        if unknown:
            raise ValueError(f"unknown profile fields: {', '.join(sorted(unknown))}")
        data = self.fetch().model_dump()
        data.update(fields)
        profile = UserProfile(**data)
        self.save(profile)
        return profile

    def clear(self) -> None:
        self._delete_all("user_profile")


class SettingsRepository(BaseRepository):
    """Repository for general application settings synchronized with YAML."""

    TEXT_KEYS = {
        "weight_unit",
        "llm_endpoint",
        "llm_api_key",
        "llm_primary_model",
        "llm_fallback_model",
    }
    _UPSERT = (
        "INSERT INTO settings (key, value) VALUES (?, ?) "
        "ON CONFLICT(key) DO UPDATE SET value=excluded.value;"
    )

    def __init__(
        self, db_path: str = "strength.db", yaml_path: str = "settings.yaml"
    ) -> None:
        super().__init__(db_path)
        self._yaml = YamlConfig(yaml_path)
        self._sync_from_yaml()
        self._sync_to_yaml()

    def _raw_all_settings(self) -> dict:
        rows = self.fetch_all("SELECT key, value FROM settings ORDER BY key;")
        result: dict[str, float | str] = {}
        for k, v in rows:
            if k in self.TEXT_KEYS:
                result[k] = v
                continue
            try:
                result[k] = float(v)
            except ValueError:
                result[k] = v
        return result

    def _sync_from_yaml(self) -> None:
        data = self._yaml.load()
        if not data:
            return
        validate_settings(data)
        with self._connection() as conn:
            for key, value in data.items():
                conn.execute(self._UPSERT, (key, str(value)))

    def _sync_to_yaml(self) -> None:
        self._yaml.save(self._raw_all_settings())

    def get_float(self, key: str, default: float) -> float:
        self._sync_from_yaml()
        rows = self.fetch_all("SELECT value FROM settings WHERE key = ?;", (key,))
        return float(rows[0][0]) if rows else default

    def set_float(self, key: str, value: float) -> None:
        self.set_text(key, str(value))

    def get_text(self, key: str, default: str) -> str:
        self._sync_from_yaml()
        rows = self.fetch_all("SELECT value FROM settings WHERE key = ?;", (key,))
        return rows[0][0] if rows else default

    def get_int(self, key: str, default: int) -> int:
        try:
            return int(float(self.get_text(key, str(default))))
        except ValueError:
            return default

    def set_text(self, key: str, value: str) -> None:
        data = self._raw_all_settings()
        data[key] = value
        validate_settings(data)
        self.execute(self._UPSERT, (key, value))
        self._sync_to_yaml()

    def all_settings(self) -> dict:
        self._sync_from_yaml()
        return self._raw_all_settings()
