# -*- coding: utf-8 -*-
# ccex/drivers/shrimpy/__init__.py
# Shrimpy aggregator package

from .driver import ShrimpyClient

__all__ = ['ShrimpyClient']
