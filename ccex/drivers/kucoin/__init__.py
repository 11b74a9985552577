# -*- coding: utf-8 -*-
# ccex/drivers/kucoin/__init__.py
# Kucoin driver package

from .driver import KucoinPublic, KucoinPrivate

__all__ = [
    'KucoinPublic',
    'KucoinPrivate',
]
