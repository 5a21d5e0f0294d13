"""
Модуль обхода каталога и классификации записей.

Для каждой записи корневого каталога (и подкаталогов в рекурсивном
режиме) определяет одно из: запланированное перемещение в каталог
вида YYYY-MM, пропуск с причиной или ошибку чтения метаданных.
"""

import os
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, Optional, Union

from .config_loader import OrganizerConfig


BUCKET_NAME_RE = re.compile(r'\d{4}-\d{2}', re.ASCII)

SKIP_BUCKET = 'bucket'
SKIP_TOO_YOUNG = 'too_young'
SKIP_COLLISION = 'collision'

SKIP_REASONS = {
    SKIP_BUCKET: 'уже упорядоченный каталог',
    SKIP_TOO_YOUNG: 'моложе минимального возраста',
    SKIP_COLLISION: 'файл назначения существует',
}


@dataclass(frozen=True)
class CandidateEntry:
    """Найденная запись с меткой времени."""
    path: Path
    timestamp: datetime


@dataclass(frozen=True)
class PlannedMove:
    """Перемещение, готовое к выполнению."""
    source: Path
    destination: Path
    bucket: str

    @property
    def bucket_dir(self) -> Path:
        return self.destination.parent


@dataclass(frozen=True)
class SkippedEntry:
    """Запись, пропущенная без ошибки."""
    path: Path
    reason: str
    destination: Optional[Path] = None

    @property
    def description(self) -> str:
        return SKIP_REASONS.get(self.reason, self.reason)


@dataclass(frozen=True)
class FailedEntry:
    """Запись, метаданные которой не удалось прочитать."""
    path: Path
    stage: str
    error: OSError


ScanResult = Union[PlannedMove, SkippedEntry, FailedEntry]


def is_bucket_name(name: str) -> bool:
    """Проверяет, что имя имеет вид YYYY-MM."""
    return BUCKET_NAME_RE.fullmatch(name) is not None


def is_bucket_dir(path: Path, base: Path, is_dir: Optional[bool] = None) -> bool:
    """
    Проверяет, является ли путь каталогом-корзиной корневого каталога.

    Каталог-корзина: каталог с именем вида YYYY-MM, непосредственно
    лежащий в корневом каталоге. В такие каталоги обход никогда не
    заходит.

    Args:
        path: Проверяемый путь
        base: Корневой каталог
        is_dir: Известный тип записи (если None, проверяется по файловой системе)
    """
    if not is_bucket_name(path.name) or path.parent != base:
        return False
    if is_dir is None:
        is_dir = path.is_dir()
    return is_dir


def local_time(value: datetime) -> datetime:
    """Приводит метку времени к местному часовому поясу (naive считается местным)."""
    return value.astimezone()


def bucket_name(timestamp: datetime) -> str:
    """Возвращает имя каталога-корзины для метки времени в местном времени."""
    timestamp = local_time(timestamp)
    return f"{timestamp.year:04d}-{timestamp.month:02d}"


class DirectoryScanner:
    """Обходит каталог и классифицирует записи."""

    def __init__(self, config: OrganizerConfig, now: Optional[datetime] = None):
        """
        Инициализация сканера.

        Args:
            config: Параметры запуска
            now: Момент отсчета возраста файлов (по умолчанию текущее время)
        """
        self.config = config
        self.base_path = config.root
        self.now = local_time(now or datetime.now(timezone.utc))

    def scan(self) -> Iterator[ScanResult]:
        """
        Обходит корневой каталог.

        Корневой каталог читается сразу при вызове, поэтому ошибка его
        чтения (OSError) выбрасывается до начала обработки записей.
        Ошибки чтения вложенных каталогов и метаданных возвращаются
        как FailedEntry.
        """
        with os.scandir(self.base_path) as it:
            entries = list(it)
        return self._process_entries(entries)

    def _scan_subdirectory(self, path: Path) -> Iterator[ScanResult]:
        try:
            with os.scandir(path) as it:
                entries = list(it)
        except OSError as e:
            yield FailedEntry(path, 'list', e)
            return
        yield from self._process_entries(entries)

    def _process_entries(self, entries) -> Iterator[ScanResult]:
        for entry in entries:
            path = Path(entry.path)
            try:
                is_dir = entry.is_dir(follow_symlinks=False)
                if not is_dir and entry.is_symlink():
                    # ссылка на каталог с именем корзины считается корзиной
                    is_dir = is_bucket_dir(path, self.base_path)
            except OSError as e:
                yield FailedEntry(path, 'stat', e)
                continue

            if is_dir:
                if is_bucket_dir(path, self.base_path, is_dir=True):
                    yield SkippedEntry(path, SKIP_BUCKET)
                elif self.config.recursive and not is_bucket_name(path.name):
                    yield from self._scan_subdirectory(path)
                continue

            try:
                candidate = self._read_candidate(entry, path)
            except OSError as e:
                yield FailedEntry(path, 'stat', e)
                continue

            yield self.classify(candidate)

    def _read_candidate(self, entry: os.DirEntry, path: Path) -> CandidateEntry:
        stat = entry.stat(follow_symlinks=False)
        raw = stat.st_atime if self.config.use_atime else stat.st_mtime
        try:
            timestamp = datetime.fromtimestamp(raw, timezone.utc).astimezone()
        except (OverflowError, ValueError) as e:
            raise OSError(f"Некорректная метка времени {raw!r}: {e}") from e
        return CandidateEntry(path=path, timestamp=timestamp)

    def is_old_enough(self, timestamp: datetime) -> bool:
        """
        Проверяет минимальный возраст.

        Нулевой минимальный возраст отключает фильтр. Метка времени из
        будущего считается недостаточно старой.
        """
        min_age = self.config.min_age
        if not min_age:
            return True
        return self.now - local_time(timestamp) >= min_age

    def classify(self, candidate: CandidateEntry) -> ScanResult:
        """Определяет судьбу файла: пропуск или запланированное перемещение."""
        if not self.is_old_enough(candidate.timestamp):
            return SkippedEntry(candidate.path, SKIP_TOO_YOUNG)

        bucket = bucket_name(candidate.timestamp)
        destination = self.base_path / bucket / candidate.path.name

        if os.path.lexists(destination):
            return SkippedEntry(candidate.path, SKIP_COLLISION, destination)

        return PlannedMove(source=candidate.path, destination=destination, bucket=bucket)
