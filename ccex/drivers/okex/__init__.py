# -*- coding: utf-8 -*-
# ccex/drivers/okex/__init__.py
# Okex driver package

from .driver import OkexPublic, OkexPrivate

__all__ = [
    'OkexPublic',
    'OkexPrivate',
]
