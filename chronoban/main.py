"""
Главный модуль CLI интерфейса для упорядочивания файлов по каталогам YYYY-MM.
"""

import argparse
import sys
from typing import List, Optional

from . import __version__
from .config_loader import Config, ConfigError, build_config
from .logger import OrganizerLogger
from .organizer import Organizer, OrganizerError, create_organizer


class OrganizerCLI:
    """Класс для обработки запуска из командной строки."""

    def __init__(self):
        self.config: Optional[Config] = None
        self.logger: Optional[OrganizerLogger] = None
        self.organizer: Optional[Organizer] = None

    def setup(self, args) -> bool:
        """
        Собирает конфигурацию и настраивает логгер.

        Args:
            args: Аргументы командной строки

        Returns:
            bool: True если инициализация успешна
        """
        try:
            self.config = build_config(
                root=args.path,
                dry_run=args.dry_run,
                min_age_days=args.min_age_days,
                recursive=args.recursive,
                use_atime=args.use_atime,
                jobs=args.jobs,
                log_level='DEBUG' if args.verbose else None,
                log_file=args.log_file,
                config_path=args.config,
            )
        except (ConfigError, FileNotFoundError) as e:
            print(f"❌ {e}", file=sys.stderr)
            self.config = None
            return False

        self.logger = OrganizerLogger(self.config.logging)
        self.organizer = create_organizer(self.config.organizer, self.logger)
        if args.config:
            self.logger.log_system_info(f"Конфигурация загружена из: {args.config}")
        return True

    def run(self) -> int:
        """
        Выполняет упорядочивание.

        Returns:
            int: Код возврата (0 - запуск завершен, 1 - критическая ошибка)
        """
        try:
            self.organizer.organize()
            return 0
        except OrganizerError as e:
            print(f"❌ {e}", file=sys.stderr)
            return 1
        finally:
            self.logger.close()


def non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"значение должно быть >= 0: {value}")
    return number


def positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"значение должно быть >= 1: {value}")
    return number


def create_parser() -> argparse.ArgumentParser:
    """
    Создает парсер аргументов командной строки.

    Returns:
        argparse.ArgumentParser: Настроенный парсер
    """
    parser = argparse.ArgumentParser(
        prog='chronoban',
        description="Раскладывает файлы каталога по подкаталогам YYYY-MM по времени изменения",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Примеры использования:

  # Упорядочить текущий каталог
  chronoban

  # Посмотреть, что будет перемещено
  chronoban ~/Downloads --dry-run

  # Только файлы старше 30 дней, с обходом подкаталогов
  chronoban ~/Downloads -a 30 -r

  # До 8 одновременных перемещений, по времени доступа
  chronoban /data/inbox -j 8 --use-atime
        """
    )

    parser.add_argument(
        'path',
        nargs='?',
        default='.',
        help='Каталог для упорядочивания (по умолчанию: текущий)'
    )
    parser.add_argument(
        '--dry-run', '-n',
        action='store_true',
        default=None,
        help='Только показать планируемые перемещения'
    )
    parser.add_argument(
        '--min-age-days', '-a',
        type=non_negative_int,
        default=None,
        metavar='N',
        help='Обрабатывать только файлы старше N дней (по умолчанию: 0)'
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        '--recursive', '-r',
        action='store_true',
        default=None,
        help='Обходить подкаталоги (каталоги YYYY-MM не обходятся, несовместимо с --jobs)'
    )
    parser.add_argument(
        '--use-atime',
        action='store_true',
        default=None,
        help='Использовать время доступа вместо времени изменения'
    )
    mode.add_argument(
        '--jobs', '-j',
        type=positive_int,
        default=None,
        metavar='N',
        help='Не более N одновременных перемещений'
    )
    parser.add_argument(
        '--config', '-c',
        default=None,
        help='Путь к INI-файлу с предустановками'
    )
    parser.add_argument(
        '--log-file',
        default=None,
        help='Дополнительно писать лог в файл (с ротацией)'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Подробный вывод'
    )
    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Главная функция CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    cli = OrganizerCLI()
    if not cli.setup(args):
        return 1

    try:
        return cli.run()
    except KeyboardInterrupt:
        print("\n⚠️ Операция прервана пользователем", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
