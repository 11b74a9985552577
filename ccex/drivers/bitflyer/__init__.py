# -*- coding: utf-8 -*-
# ccex/drivers/bitflyer/__init__.py
# Bitflyer driver package

from .driver import BitflyerPublic, BitflyerPrivate

__all__ = [
    'BitflyerPublic',
    'BitflyerPrivate',
]
