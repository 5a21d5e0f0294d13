"""
chronoban

Утилита для раскладывания файлов каталога по подкаталогам YYYY-MM
по времени изменения (или доступа).
"""

__version__ = "1.0.0"
