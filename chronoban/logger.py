"""
Модуль для настройки и управления логированием приложения.

Обеспечивает централизованную настройку логирования с цветным выводом
в консоль (ошибки и предупреждения в stderr) и необязательной ротацией
файла лога.
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional

from .config_loader import LoggingConfig


LOGGER_NAME = 'chronoban'


class ColoredFormatter(logging.Formatter):
    """Форматтер с цветным выводом для консоли."""

    # Цветовые коды ANSI
    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
        'RESET': '\033[0m'        # Reset
    }

    def format(self, record):
        """Форматирует запись лога с цветом."""
        # Копия, чтобы цвет не попал в файловый обработчик
        record = logging.makeLogRecord(record.__dict__)
        if record.levelname in self.COLORS:
            record.levelname = f"{self.COLORS[record.levelname]}{record.levelname}{self.COLORS['RESET']}"

        return super().format(record)


class _BelowWarningFilter(logging.Filter):
    def filter(self, record):
        return record.levelno < logging.WARNING


class OrganizerLogger:
    """Класс для управления логированием упорядочивания файлов."""

    def __init__(self, config: LoggingConfig):
        """
        Инициализация логгера.

        Args:
            config: Конфигурация логирования
        """
        self.config = config
        self.logger: Optional[logging.Logger] = None
        self._setup_logger()

    def _setup_logger(self) -> None:
        """Настраивает логгер с консольным и, при необходимости, файловым выводом."""
        level = getattr(logging, self.config.level.upper())

        self.logger = logging.getLogger(LOGGER_NAME)
        self.logger.setLevel(level)

        # Очищаем существующие обработчики
        for handler in self.logger.handlers[:]:
            handler.close()
            self.logger.removeHandler(handler)

        formatter = logging.Formatter(
            fmt='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        colored_formatter = ColoredFormatter(
            fmt='%(asctime)s [%(levelname)s] %(message)s',
            datefmt='%H:%M:%S'
        )

        stdout_handler = logging.StreamHandler(sys.stdout)
        stdout_handler.setFormatter(colored_formatter)
        stdout_handler.setLevel(level)
        stdout_handler.addFilter(_BelowWarningFilter())
        self.logger.addHandler(stdout_handler)

        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setFormatter(colored_formatter)
        stderr_handler.setLevel(max(level, logging.WARNING))
        self.logger.addHandler(stderr_handler)

        if self.config.log_file is not None:
            log_file_path = Path(self.config.log_file)
            log_file_path.parent.mkdir(parents=True, exist_ok=True)

            file_handler = logging.handlers.RotatingFileHandler(
                filename=log_file_path,
                maxBytes=self.config.max_log_size * 1024 * 1024,  # MB в байты
                backupCount=self.config.backup_count,
                encoding='utf-8'
            )
            file_handler.setFormatter(formatter)
            file_handler.setLevel(level)
            self.logger.addHandler(file_handler)

        # Предотвращаем дублирование сообщений
        self.logger.propagate = False

    def close(self) -> None:
        """Закрывает обработчики логгера."""
        for handler in self.logger.handlers[:]:
            handler.close()
            self.logger.removeHandler(handler)

    def log_run_start(self, root: Path, dry_run: bool, jobs: Optional[int] = None) -> None:
        """
        Логирует начало упорядочивания.

        Args:
            root: Корневой каталог
            dry_run: Режим пробного запуска
            jobs: Предел одновременных перемещений (None - последовательно)
        """
        self.logger.info(f"📂 Упорядочивание файлов в: {root}")
        if dry_run:
            self.logger.info("🔍 Пробный запуск: файлы не будут перемещены")
        if jobs is not None:
            self.logger.info(f"⚙️ Одновременных операций: не более {jobs}")

    def log_would_move(self, source_path: Path, target_path: Path) -> None:
        """Логирует перемещение, которое было бы выполнено."""
        self.logger.info(f"📦 Будет перемещен: {source_path} → {target_path}")

    def log_file_moved(self, source_path: Path, target_path: Path) -> None:
        """
        Логирует успешное перемещение файла.

        Args:
            source_path: Исходный путь
            target_path: Целевой путь
        """
        self.logger.info(f"✅ Перемещен: {source_path} → {target_path}")

    def log_skip(self, path: Path, reason: str) -> None:
        """
        Логирует пропуск записи.

        Args:
            path: Путь к записи
            reason: Причина пропуска
        """
        self.logger.info(f"⏭️ Пропущен ({reason}): {path}")

    def log_collision(self, source_path: Path, target_path: Path) -> None:
        """Логирует пропуск из-за существующего файла назначения."""
        self.logger.warning(f"⚠️ Файл назначения уже существует, пропуск: {source_path} → {target_path}")

    def log_entry_error(self, path: Path, error: Exception) -> None:
        """
        Логирует ошибку при обработке записи.

        Args:
            path: Путь к записи
            error: Исключение
        """
        self.logger.error(f"❌ Ошибка при обработке {path}: {error}")

    def log_summary(self, moved: int, skipped: int, errors: int) -> None:
        """
        Логирует итоговую статистику.

        Args:
            moved: Перемещено файлов
            skipped: Пропущено
            errors: Ошибок
        """
        self.logger.info("📊 Итог:")
        self.logger.info(f"   • Перемещено файлов: {moved}")
        self.logger.info(f"   • Пропущено: {skipped}")
        self.logger.info(f"   • Ошибок: {errors}")

    def log_system_info(self, info: str) -> None:
        """Логирует системную информацию."""
        self.logger.info(f"ℹ️ {info}")

    def log_debug(self, message: str) -> None:
        self.logger.debug(message)

    def log_critical_error(self, message: str, error: Exception = None) -> None:
        """
        Логирует критическую ошибку.

        Args:
            message: Сообщение об ошибке
            error: Исключение (опционально)
        """
        if error:
            self.logger.critical(f"💥 {message}: {error}")
        else:
            self.logger.critical(f"💥 {message}")
