# -*- coding: utf-8 -*-
# ccex/drivers/hitbtc/__init__.py
# Hitbtc driver package

from .driver import HitbtcPublic, HitbtcPrivate

__all__ = [
    'HitbtcPublic',
    'HitbtcPrivate',
]
