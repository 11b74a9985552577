# -*- coding: utf-8 -*-
# ccex/drivers/poloniex/__init__.py
# Poloniex driver package

from .driver import PoloniexPublic, PoloniexPrivate

__all__ = [
    'PoloniexPublic',
    'PoloniexPrivate',
]
