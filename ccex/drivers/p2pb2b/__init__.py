# -*- coding: utf-8 -*-
# ccex/drivers/p2pb2b/__init__.py
# P2pb2b driver package

from .driver import P2pb2bPublic, P2pb2bPrivate

__all__ = [
    'P2pb2bPublic',
    'P2pb2bPrivate',
]
