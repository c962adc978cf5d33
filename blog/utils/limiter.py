# blog/utils/limiter.py

"""
Общий ограничитель частоты запросов (slowapi), ключ - IP клиента
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)
