"""
Модуль бизнес-логики упорядочивания файлов.

Объединяет обход каталога и операции с файловой системой: каждое
запланированное перемещение выполняется (или имитируется в пробном
запуске) последовательно либо в пуле потоков с ограничением числа
одновременных операций. Статистика обновляется в одном месте.
"""

from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional, Set

from .config_loader import OrganizerConfig
from .file_ops import FileOperationError, FileOps
from .logger import OrganizerLogger
from .scanner import (
    SKIP_COLLISION,
    DirectoryScanner,
    FailedEntry,
    PlannedMove,
    ScanResult,
    SkippedEntry,
)


STATUS_MOVED = 'moved'
STATUS_WOULD_MOVE = 'would_move'
STATUS_FAILED = 'failed'


class OrganizerError(Exception):
    """Исключение для ошибок, прерывающих весь запуск."""
    pass


class OrganizeStats:
    """Класс для хранения статистики запуска."""

    def __init__(self):
        self.moved = 0
        self.skipped = 0
        self.errors = 0
        self.start_time = None
        self.end_time = None
        self.failures = []

    def record_moved(self) -> None:
        self.moved += 1

    def record_skipped(self) -> None:
        self.skipped += 1

    def record_error(self, path: Path, error: Exception) -> None:
        """Учитывает ошибку и добавляет ее в список."""
        self.errors += 1
        self.failures.append({
            'path': str(path),
            'error': str(error),
            'timestamp': datetime.now()
        })

    def get_duration(self) -> Optional[float]:
        """Возвращает продолжительность запуска в секундах."""
        if self.start_time and self.end_time:
            return (self.end_time - self.start_time).total_seconds()
        return None


@dataclass(frozen=True)
class MoveResult:
    """Итог выполнения одного перемещения."""
    move: PlannedMove
    status: str
    stage: Optional[str] = None
    error: Optional[Exception] = None


class Organizer:
    """Основной класс упорядочивания файлов по каталогам YYYY-MM."""

    def __init__(
        self,
        config: OrganizerConfig,
        logger: OrganizerLogger,
        file_ops: Optional[FileOps] = None,
        now: Optional[datetime] = None,
    ):
        """
        Инициализация.

        Args:
            config: Параметры запуска
            logger: Логгер
            file_ops: Операции с файловой системой
            now: Момент отсчета возраста файлов
        """
        self.config = config
        self.logger = logger
        self.file_ops = file_ops or FileOps(logger)
        self.now = now
        self.stats = OrganizeStats()

    def organize(self) -> OrganizeStats:
        """
        Упорядочивает корневой каталог.

        Returns:
            OrganizeStats: Статистика запуска

        Raises:
            OrganizerError: Если корневой каталог не удалось прочитать
        """
        self.stats.start_time = datetime.now()
        self.logger.log_run_start(self.config.root, self.config.dry_run, self.config.jobs)

        scanner = DirectoryScanner(self.config, now=self.now)
        try:
            results = scanner.scan()
        except OSError as e:
            self.stats.end_time = datetime.now()
            self.logger.log_critical_error(f"Не удалось прочитать каталог {self.config.root}", e)
            raise OrganizerError(f"Не удалось прочитать каталог {self.config.root}: {e}") from e

        if self.config.concurrent:
            self._run_concurrent(results, self.config.jobs)
        else:
            self._run_sequential(results)

        self.stats.end_time = datetime.now()
        self.logger.log_summary(self.stats.moved, self.stats.skipped, self.stats.errors)
        self.logger.log_debug(f"Завершено за {self.stats.get_duration():.2f} сек")
        return self.stats

    def _run_sequential(self, results: Iterable[ScanResult]) -> None:
        for result in results:
            if isinstance(result, PlannedMove):
                self._record_move(self.execute_move(result))
            else:
                self._record_scan_result(result)

    def _run_concurrent(self, results: Iterable[ScanResult], jobs: int) -> None:
        """
        Выполняет перемещения в пуле потоков.

        Не более jobs перемещений выполняются одновременно. Когда все
        места заняты, обход ждет завершения любого из них. Статистику
        обновляет только этот поток. Повторный путь назначения в одном
        запуске считается существующим файлом назначения.
        """
        pending: Set[Future] = set()
        claimed: Set[Path] = set()
        with ThreadPoolExecutor(max_workers=jobs, thread_name_prefix='chronoban') as executor:
            for result in results:
                if not isinstance(result, PlannedMove):
                    self._record_scan_result(result)
                    continue
                if result.destination in claimed:
                    self._record_scan_result(
                        SkippedEntry(result.source, SKIP_COLLISION, result.destination)
                    )
                    continue
                claimed.add(result.destination)

                if len(pending) >= jobs:
                    done, pending = wait(pending, return_when=FIRST_COMPLETED)
                    self._drain(done)
                pending.add(executor.submit(self.execute_move, result))

            while pending:
                done, pending = wait(pending, return_when=FIRST_COMPLETED)
                self._drain(done)

    def _drain(self, futures: Iterable[Future]) -> None:
        for future in futures:
            self._record_move(future.result())

    def execute_move(self, move: PlannedMove) -> MoveResult:
        """
        Выполняет одно перемещение. Статистику не изменяет.

        Args:
            move: Запланированное перемещение

        Returns:
            MoveResult: Итог перемещения
        """
        if self.config.dry_run:
            return MoveResult(move, STATUS_WOULD_MOVE)

        try:
            self.file_ops.ensure_bucket_dir(move.bucket_dir)
        except FileOperationError as e:
            return MoveResult(move, STATUS_FAILED, 'mkdir', e)

        try:
            self.file_ops.move_file(move.source, move.destination)
        except FileOperationError as e:
            return MoveResult(move, STATUS_FAILED, 'rename', e)

        return MoveResult(move, STATUS_MOVED)

    def _record_move(self, result: MoveResult) -> None:
        move = result.move
        if result.status == STATUS_WOULD_MOVE:
            self.logger.log_would_move(move.source, move.destination)
            self.stats.record_moved()
        elif result.status == STATUS_MOVED:
            self.logger.log_file_moved(move.source, move.destination)
            self.stats.record_moved()
        else:
            self.logger.log_entry_error(move.source, result.error)
            self.stats.record_error(move.source, result.error)

    def _record_scan_result(self, result: ScanResult) -> None:
        if isinstance(result, FailedEntry):
            self.logger.log_entry_error(result.path, result.error)
            self.stats.record_error(result.path, result.error)
        elif isinstance(result, SkippedEntry):
            if result.reason == SKIP_COLLISION:
                self.logger.log_collision(result.path, result.destination)
            else:
                self.logger.log_skip(result.path, result.description)
            self.stats.record_skipped()


def create_organizer(config: OrganizerConfig, logger: OrganizerLogger) -> Organizer:
    """
    Удобная функция для создания объекта упорядочивания.

    Args:
        config: Параметры запуска
        logger: Логгер

    Returns:
        Organizer: Объект упорядочивания
    """
    return Organizer(config, logger)
