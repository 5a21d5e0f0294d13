"""
Модуль для загрузки и валидации конфигурации запуска.

Собирает параметры из необязательного INI-файла (секции [organizer] и
[logging]) и аргументов командной строки, валидирует их и приводит
корневой каталог к абсолютному каноническому виду.
"""

import configparser
from dataclasses import dataclass, field, replace
from datetime import timedelta
from pathlib import Path
from typing import Optional, Union


VALID_LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


class ConfigError(ValueError):
    """Исключение для некорректной конфигурации."""
    pass


class RootPathError(ConfigError):
    """Корневой каталог не существует, недоступен или не является каталогом."""
    pass


@dataclass
class LoggingConfig:
    """Конфигурация логирования."""
    level: str = 'INFO'
    log_file: Optional[Path] = None
    max_log_size: int = 10
    backup_count: int = 5


@dataclass(frozen=True)
class OrganizerConfig:
    """Параметры одного запуска. Не изменяются во время работы."""
    root: Path
    dry_run: bool = False
    min_age: timedelta = timedelta(0)
    use_atime: bool = False
    recursive: bool = False
    jobs: Optional[int] = None

    @property
    def concurrent(self) -> bool:
        return self.jobs is not None


@dataclass
class Config:
    """Основная конфигурация приложения."""
    organizer: OrganizerConfig
    logging: LoggingConfig = field(default_factory=LoggingConfig)


@dataclass
class OrganizerDefaults:
    """Значения секции [organizer] до объединения с аргументами CLI."""
    dry_run: bool = False
    min_age_days: int = 0
    recursive: bool = False
    use_atime: bool = False
    jobs: Optional[int] = None


class ConfigLoader:
    """Класс для загрузки и валидации INI-файла с предустановками."""

    def __init__(self, config_path: Union[str, Path]):
        """
        Инициализация загрузчика конфигурации.

        Args:
            config_path: Путь к файлу конфигурации
        """
        self.config_path = Path(config_path)

    def load_config(self):
        """
        Загружает предустановки из файла.

        Returns:
            Tuple[OrganizerDefaults, LoggingConfig]: Значения секций

        Raises:
            FileNotFoundError: Если файл конфигурации не найден
            ConfigError: Если конфигурация некорректна
        """
        if not self.config_path.exists():
            raise FileNotFoundError(f"Файл конфигурации не найден: {self.config_path}")

        parser = configparser.ConfigParser()
        try:
            parser.read(self.config_path, encoding='utf-8')
            defaults = self._load_organizer_defaults(parser)
            logging_config = self._load_logging_config(parser)
        except (configparser.Error, ValueError) as e:
            raise ConfigError(f"Ошибка загрузки конфигурации {self.config_path}: {e}") from e

        validate_logging_config(logging_config)
        return defaults, logging_config

    def _load_organizer_defaults(self, parser: configparser.ConfigParser) -> OrganizerDefaults:
        """Загружает секцию [organizer]. Секция необязательна."""
        section = 'organizer'
        if not parser.has_section(section):
            return OrganizerDefaults()

        jobs = parser.get(section, 'jobs', fallback='').strip()
        return OrganizerDefaults(
            dry_run=parser.getboolean(section, 'dry_run', fallback=False),
            min_age_days=parser.getint(section, 'min_age_days', fallback=0),
            recursive=parser.getboolean(section, 'recursive', fallback=False),
            use_atime=parser.getboolean(section, 'use_atime', fallback=False),
            jobs=int(jobs) if jobs else None,
        )

    def _load_logging_config(self, parser: configparser.ConfigParser) -> LoggingConfig:
        """Загружает секцию [logging]. Секция необязательна."""
        section = 'logging'
        if not parser.has_section(section):
            return LoggingConfig()

        log_file = parser.get(section, 'log_file', fallback='').strip()
        return LoggingConfig(
            level=parser.get(section, 'level', fallback='INFO'),
            log_file=Path(log_file) if log_file else None,
            max_log_size=parser.getint(section, 'max_log_size', fallback=10),
            backup_count=parser.getint(section, 'backup_count', fallback=5),
        )


def validate_logging_config(config: LoggingConfig) -> None:
    """Валидирует конфигурацию логирования."""
    if config.level.upper() not in VALID_LOG_LEVELS:
        raise ConfigError(f"Некорректный уровень логирования: {config.level}")
    if config.max_log_size <= 0:
        raise ConfigError("Размер файла лога должен быть больше 0")
    if config.backup_count < 0:
        raise ConfigError("Количество архивных логов не может быть отрицательным")


def resolve_root(path: Union[str, Path]) -> Path:
    """
    Приводит корневой каталог к абсолютному каноническому пути.

    Raises:
        RootPathError: Если путь не существует или не является каталогом
    """
    try:
        root = Path(path).resolve(strict=True)
    except (OSError, RuntimeError) as e:
        raise RootPathError(f"Не удалось получить доступ к каталогу {path}: {e}") from e

    if not root.is_dir():
        raise RootPathError(f"Путь должен быть каталогом: {root}")
    return root


def build_config(
    root: Union[str, Path] = '.',
    dry_run: Optional[bool] = None,
    min_age_days: Optional[int] = None,
    recursive: Optional[bool] = None,
    use_atime: Optional[bool] = None,
    jobs: Optional[int] = None,
    log_level: Optional[str] = None,
    log_file: Optional[Union[str, Path]] = None,
    config_path: Optional[Union[str, Path]] = None,
) -> Config:
    """
    Собирает конфигурацию запуска.

    Значения, переданные явно (не None), имеют приоритет над
    предустановками из файла конфигурации.

    Args:
        root: Каталог для упорядочивания
        dry_run: Только показать планируемые перемещения
        min_age_days: Минимальный возраст файла в днях
        recursive: Обходить подкаталоги
        use_atime: Использовать время доступа вместо времени изменения
        jobs: Максимальное число одновременных перемещений
        log_level: Уровень логирования
        log_file: Файл лога
        config_path: Путь к INI-файлу с предустановками

    Returns:
        Config: Объект конфигурации

    Raises:
        ConfigError: Если параметры некорректны
        RootPathError: Если корневой каталог недоступен
    """
    if config_path is not None:
        defaults, logging_config = ConfigLoader(config_path).load_config()
    else:
        defaults, logging_config = OrganizerDefaults(), LoggingConfig()

    def pick(value, fallback):
        return fallback if value is None else value

    min_age_days = pick(min_age_days, defaults.min_age_days)
    jobs = pick(jobs, defaults.jobs)

    if min_age_days < 0:
        raise ConfigError("Минимальный возраст не может быть отрицательным")
    if jobs is not None and jobs < 1:
        raise ConfigError("Количество одновременных операций должно быть не меньше 1")

    recursive = pick(recursive, defaults.recursive)
    if recursive and jobs is not None:
        raise ConfigError("Рекурсивный обход доступен только в последовательном режиме (без --jobs)")

    if log_level is not None:
        logging_config = replace(logging_config, level=log_level)
    if log_file is not None:
        logging_config = replace(logging_config, log_file=Path(log_file))
    validate_logging_config(logging_config)

    organizer = OrganizerConfig(
        root=resolve_root(root),
        dry_run=pick(dry_run, defaults.dry_run),
        min_age=timedelta(days=min_age_days),
        use_atime=pick(use_atime, defaults.use_atime),
        recursive=recursive,
        jobs=jobs,
    )
    return Config(organizer=organizer, logging=logging_config)
