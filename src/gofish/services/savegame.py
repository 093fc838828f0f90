from __future__ import annotations

import json
import logging
from pathlib import Path

from jsonschema import Draft202012Validator

from gofish.engine.game import GameConfig, GameState
from gofish.engine.serialize import RecordError, state_from_record, state_to_record

logger = logging.getLogger(__name__)

SCHEMA_FILE = "game_state.schema.json"


class SaveGameError(RuntimeError):
    pass


class SchemaError(RuntimeError):
    """The packaged schema is missing or unreadable."""


def _load_json(path: Path) -> object:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise SaveGameError(f"Missing save file: {path}") from e
    except json.JSONDecodeError as e:
        raise SaveGameError(f"Invalid JSON in {path}: {e}") from e
    except OSError as e:
        raise SaveGameError(f"Cannot read {path}: {e}") from e


def _load_schema(path: Path) -> object:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise SchemaError(f"Missing schema file: {path}") from e
    except (json.JSONDecodeError, OSError) as e:
        raise SchemaError(f"Cannot load schema {path}: {e}") from e


def validate_json(instance: object, schema: object, *, context: str) -> None:
    validator = Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(instance), key=lambda e: [str(p) for p in e.path])
    if errors:
        lines = [f"Schema validation failed for {context}:"]
        for err in errors[:10]:
            loc = "/".join(str(p) for p in err.absolute_path)
            lines.append(f"- {loc}: {err.message}")
        raise SaveGameError("\n".join(lines))


class SaveGameService:
    """Stores at most one game as a flat JSON record."""

    def __init__(self, save_path: Path, schema_dir: Path, config: GameConfig | None = None) -> None:
        self._path = save_path
        self._schema_dir = schema_dir
        self._config = config

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.exists()

    def save(self, state: GameState) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(state_to_record(state), indent=2), encoding="utf-8")

    def validate(self, record: object) -> None:
        schema = _load_schema(self._schema_dir / SCHEMA_FILE)
        validate_json(record, schema, context=str(self._path))

    def load(self, seed: int | None = None) -> GameState:
        raw = _load_json(self._path)
        self.validate(raw)
        if not isinstance(raw, dict):
            raise SaveGameError("Save file must be an object")
        try:
            return state_from_record(raw, seed=seed, config=self._config)
        except RecordError as e:
            raise SaveGameError(f"Corrupt save file {self._path}: {e}") from e

    def load_or_none(self, seed: int | None = None) -> GameState | None:
        """Like `load`, but a missing or unreadable save just means no game.

        SchemaError propagates.
        """
        if not self._path.exists():
            return None
        try:
            return self.load(seed=seed)
        except SaveGameError as e:
            logger.warning("Discarding saved game: %s", e)
            return None

    def clear(self) -> None:
        self._path.unlink(missing_ok=True)
