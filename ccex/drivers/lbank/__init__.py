# -*- coding: utf-8 -*-
# ccex/drivers/lbank/__init__.py
# Lbank driver package

from .driver import LbankPublic, LbankPrivate

__all__ = [
    'LbankPublic',
    'LbankPrivate',
]
