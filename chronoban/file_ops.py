"""
Модуль для операций с файловой системой.

Создание каталогов-корзин YYYY-MM и перемещение файлов в пределах одной
файловой системы (переименование, без копирования).
"""

import os
from pathlib import Path

from .logger import OrganizerLogger


class FileOperationError(Exception):
    """Исключение для ошибок операций с файлами."""

    def __init__(self, message: str, path: Path, error: OSError = None):
        super().__init__(message)
        self.path = path
        self.error = error


class DirectoryCreateError(FileOperationError):
    """Не удалось создать каталог-корзину."""
    pass


class MoveError(FileOperationError):
    """Не удалось переименовать файл."""
    pass


class FileOps:
    """Класс для операций с файловой системой."""

    def __init__(self, logger: OrganizerLogger):
        """
        Инициализация операций с файлами.

        Args:
            logger: Логгер для записи операций
        """
        self.logger = logger

    def ensure_bucket_dir(self, bucket_dir: Path) -> Path:
        """
        Создает каталог-корзину (вместе с родительскими) если он не существует.

        Args:
            bucket_dir: Путь к каталогу

        Returns:
            Path: Путь к каталогу

        Raises:
            DirectoryCreateError: Если каталог создать не удалось
        """
        try:
            bucket_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DirectoryCreateError(
                f"Ошибка создания каталога {bucket_dir}: {e}", bucket_dir, e
            ) from e
        self.logger.log_debug(f"Каталог готов: {bucket_dir}")
        return bucket_dir

    def move_file(self, source_path: Path, target_path: Path) -> Path:
        """
        Перемещает файл переименованием.

        Существование файла назначения проверяется при планировании;
        здесь копирование между файловыми системами не выполняется.

        Args:
            source_path: Исходный путь
            target_path: Путь назначения

        Returns:
            Path: Путь к перемещенному файлу

        Raises:
            MoveError: Если переименование не удалось
        """
        try:
            os.rename(source_path, target_path)
        except OSError as e:
            raise MoveError(
                f"Ошибка перемещения {source_path} → {target_path}: {e}", source_path, e
            ) from e
        return target_path

