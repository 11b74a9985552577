# -*- coding: utf-8 -*-
# ccex/drivers/binance/__init__.py
# Binance driver package

from .driver import BinancePublic, BinancePrivate

__all__ = [
    'BinancePublic',
    'BinancePrivate',
]
