"""
Configuration loading from config.yaml.

Uses typed dataclasses throughout so the rest of the app gets IDE
completion and type-checker support without touching raw dicts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml


@dataclass
class ScoreAction:
    label: str
    points: int


def _default_score_actions() -> list[ScoreAction]:
    return [
        ScoreAction("Spin Finish", 1),
        ScoreAction("Pocket/Burst", 2),
        ScoreAction("Extreme Finish", 3),
    ]


@dataclass
class TournamentConfig:
    match_point: int = 5
    match_point_options: list[int] = field(default_factory=lambda: [4, 5, 7])
    score_actions: list[ScoreAction] = field(default_factory=_default_score_actions)
    auto_advance: bool = True   # advance the bracket as soon as a round is decided


@dataclass
class StorageConfig:
    directory: str = "./saves"
    elimination_key: str = "lastTournament"
    swiss_key: str = "swissTournament"

    @property
    def directory_path(self) -> Path:
        return Path(self.directory)


@dataclass
class LoggingConfig:
    level: str = "INFO"
    file: str | None = "./logs/tourney.log"


@dataclass
class Config:
    tournament: TournamentConfig = field(default_factory=TournamentConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(path: str | Path = "config.yaml") -> Config:
    """
    Load and validate config.yaml.

    Raises:
        FileNotFoundError: config.yaml is missing.
        ValueError: fields are invalid.
    """
    cfg_path = Path(path)
    if not cfg_path.exists():
        raise FileNotFoundError(
            f"Config file not found: {cfg_path.resolve()}\n"
            "Copy config.example.yaml to config.yaml to customise the defaults."
        )

    with cfg_path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    try:
        t_raw = raw.get("tournament") or {}
        defaults = TournamentConfig()
        actions_raw = t_raw.get("score_actions")
        tournament = TournamentConfig(
            match_point=int(t_raw.get("match_point", defaults.match_point)),
            match_point_options=[
                int(v) for v in t_raw.get("match_point_options", defaults.match_point_options)
            ],
            score_actions=(
                [ScoreAction(label=str(a["label"]), points=int(a["points"])) for a in actions_raw]
                if actions_raw is not None
                else defaults.score_actions
            ),
            auto_advance=bool(t_raw.get("auto_advance", defaults.auto_advance)),
        )

        s_raw = raw.get("storage") or {}
        storage = StorageConfig(
            directory=str(s_raw.get("directory", StorageConfig.directory)),
            elimination_key=str(s_raw.get("elimination_key", StorageConfig.elimination_key)),
            swiss_key=str(s_raw.get("swiss_key", StorageConfig.swiss_key)),
        )

        l_raw = raw.get("logging") or {}
        log_file = l_raw.get("file", LoggingConfig.file)
        logging_cfg = LoggingConfig(
            level=str(l_raw.get("level", LoggingConfig.level)).upper(),
            file=str(log_file) if log_file else None,
        )

        config = Config(tournament=tournament, storage=storage, logging=logging_cfg)
    except (KeyError, TypeError, AttributeError) as exc:
        raise ValueError(f"Invalid config.yaml structure: {exc}") from exc

    _validate(config)
    return config


def load_config_or_default(path: str | Path = "config.yaml") -> Config:
    """Like load_config(), but a missing file yields the built-in defaults."""
    try:
        return load_config(path)
    except FileNotFoundError:
        return Config()


def _validate(config: Config) -> None:
    t = config.tournament
    if t.match_point < 1:
        raise ValueError("tournament.match_point must be >= 1")
    if not t.match_point_options or any(v < 1 for v in t.match_point_options):
        raise ValueError("tournament.match_point_options must be positive integers")
    if any(a.points < 1 for a in t.score_actions):
        raise ValueError("tournament.score_actions points must be >= 1")
    if config.storage.elimination_key == config.storage.swiss_key:
        raise ValueError("storage.elimination_key and storage.swiss_key must differ")
    valid_levels = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
    if config.logging.level not in valid_levels:
        raise ValueError(
            f"logging.level must be one of {valid_levels}, got '{config.logging.level}'"
        )
