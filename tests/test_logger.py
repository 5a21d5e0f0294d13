"""
Тесты для модуля logger.py
"""

import logging
import logging.handlers
import shutil
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

from chronoban.config_loader import LoggingConfig
from chronoban.logger import (
    LOGGER_NAME,
    ColoredFormatter,
    OrganizerLogger,
)


def make_record(level=logging.INFO, msg='Test message'):
    return logging.LogRecord(
        name='test',
        level=level,
        pathname='',
        lineno=0,
        msg=msg,
        args=(),
        exc_info=None
    )


class TestColoredFormatter:
    """Тесты для ColoredFormatter."""

    def test_colored_formatter(self):
        """Тест цветного форматтера."""
        formatter = ColoredFormatter(fmt='[%(levelname)s] %(message)s')

        formatted = formatter.format(make_record())

        assert '\033[32m' in formatted  # Зеленый цвет для INFO
        assert '\033[0m' in formatted
        assert 'Test message' in formatted
        assert 'INFO' in formatted

    def test_record_is_not_modified(self):
        """Цвет не должен попадать в другие обработчики."""
        formatter = ColoredFormatter(fmt='[%(levelname)s] %(message)s')
        record = make_record(level=logging.ERROR)

        formatter.format(record)

        assert record.levelname == 'ERROR'


@pytest.fixture
def temp_dir():
    """Создает временную директорию для тестов."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    logger = logging.getLogger(LOGGER_NAME)
    for handler in logger.handlers[:]:
        handler.close()
        logger.removeHandler(handler)
    shutil.rmtree(temp_path, ignore_errors=True)


class TestOrganizerLogger:
    """Тесты для OrganizerLogger."""

    def test_logger_initialization(self, temp_dir):
        """Тест инициализации логгера."""
        logger = OrganizerLogger(LoggingConfig(level='DEBUG'))

        assert logger.logger.name == LOGGER_NAME
        assert logger.logger.level == logging.DEBUG
        assert logger.logger.propagate is False

    def test_console_handlers_only_by_default(self, temp_dir):
        logger = OrganizerLogger(LoggingConfig())
        handler_types = [type(h).__name__ for h in logger.logger.handlers]

        assert handler_types == ['StreamHandler', 'StreamHandler']

    def test_file_handler(self, temp_dir):
        """Тест файлового обработчика с ротацией."""
        log_file = temp_dir / "logs" / "chronoban.log"
        logger = OrganizerLogger(LoggingConfig(level='INFO', log_file=log_file, max_log_size=1, backup_count=2))

        handlers = logger.logger.handlers
        rotating = [h for h in handlers if isinstance(h, logging.handlers.RotatingFileHandler)]
        assert len(rotating) == 1
        assert rotating[0].maxBytes == 1024 * 1024
        assert rotating[0].backupCount == 2
        assert log_file.parent.exists()

        logger.log_file_moved(Path("a.txt"), Path("2023-03/a.txt"))
        logger.close()

        content = log_file.read_text(encoding='utf-8')
        assert "a.txt" in content
        assert '\033[' not in content

    def test_repeated_setup_does_not_duplicate_handlers(self, temp_dir):
        OrganizerLogger(LoggingConfig())
        logger = OrganizerLogger(LoggingConfig())

        assert len(logger.logger.handlers) == 2

    def test_errors_go_to_stderr(self, temp_dir, capsys):
        """Ошибки выводятся в stderr, информация в stdout."""
        logger = OrganizerLogger(LoggingConfig())

        logger.log_file_moved(Path("a.txt"), Path("2023-03/a.txt"))
        logger.log_entry_error(Path("b.txt"), OSError("permission denied"))

        captured = capsys.readouterr()
        assert "a.txt" in captured.out
        assert "b.txt" not in captured.out
        assert "b.txt" in captured.err
        assert "permission denied" in captured.err

    def test_debug_hidden_at_info(self, temp_dir, capsys):
        logger = OrganizerLogger(LoggingConfig(level='INFO'))

        logger.log_debug("hidden detail")

        captured = capsys.readouterr()
        assert "hidden detail" not in captured.out

    def test_log_run_start(self, temp_dir):
        """Тест логирования начала запуска."""
        logger = OrganizerLogger(LoggingConfig())

        with patch.object(logger.logger, 'info') as mock_info:
            logger.log_run_start(Path("/data"), dry_run=True, jobs=4)

            calls = [call[0][0] for call in mock_info.call_args_list]
            assert mock_info.call_count == 3
            assert any("/data" in call for call in calls)
            assert any("Пробный запуск" in call for call in calls)
            assert any("4" in call for call in calls)

    def test_log_run_start_sequential(self, temp_dir):
        logger = OrganizerLogger(LoggingConfig())

        with patch.object(logger.logger, 'info') as mock_info:
            logger.log_run_start(Path("/data"), dry_run=False)

            assert mock_info.call_count == 1

    def test_log_summary(self, temp_dir):
        """Тест логирования итоговой статистики."""
        logger = OrganizerLogger(LoggingConfig())

        with patch.object(logger.logger, 'info') as mock_info:
            logger.log_summary(moved=3, skipped=2, errors=1)

            calls = [call[0][0] for call in mock_info.call_args_list]
            assert mock_info.call_count == 4
            assert any("Перемещено файлов: 3" in call for call in calls)
            assert any("Пропущено: 2" in call for call in calls)
            assert any("Ошибок: 1" in call for call in calls)

    def test_log_collision_is_warning(self, temp_dir):
        logger = OrganizerLogger(LoggingConfig())

        with patch.object(logger.logger, 'warning') as mock_warning:
            logger.log_collision(Path("a.txt"), Path("2023-03/a.txt"))

            mock_warning.assert_called_once()
            assert "уже существует" in mock_warning.call_args[0][0]

    def test_log_skip_and_would_move(self, temp_dir):
        logger = OrganizerLogger(LoggingConfig())

        with patch.object(logger.logger, 'info') as mock_info:
            logger.log_skip(Path("2023-03"), "уже упорядоченный каталог")
            logger.log_would_move(Path("a.txt"), Path("2023-03/a.txt"))

            calls = [call[0][0] for call in mock_info.call_args_list]
            assert "уже упорядоченный каталог" in calls[0]
            assert "Будет перемещен" in calls[1]

    def test_log_critical_error(self, temp_dir):
        logger = OrganizerLogger(LoggingConfig())

        with patch.object(logger.logger, 'critical') as mock_critical:
            logger.log_critical_error("Сбой", ValueError("boom"))
            logger.log_critical_error("Сбой")

            assert mock_critical.call_args_list[0][0][0] == "💥 Сбой: boom"
            assert mock_critical.call_args_list[1][0][0] == "💥 Сбой"

