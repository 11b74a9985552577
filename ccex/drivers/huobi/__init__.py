# -*- coding: utf-8 -*-
# ccex/drivers/huobi/__init__.py
# Huobi driver package

from .driver import HuobiPublic, HuobiPrivate

__all__ = [
    'HuobiPublic',
    'HuobiPrivate',
]
