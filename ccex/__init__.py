# -*- coding: utf-8 -*-
# ccex/__init__.py
# Unified client library for crypto spot exchanges

from ccex.core.kernel.errors import (CcexError, TransportFailure, DecodeFailure, SchemaMismatch,
                                     AuthFailure, VenueError, UnknownPair, PrecisionUnknown,
                                     UnknownVenue, InsufficientDepth)
from ccex.core.kernel.models import (OrderType, CurrencyPair, Precisions, TradeFee, Asset,
                                     OrderBookTick, Balance, Order, Board, BoardBar)
from ccex.core.runtime.registry import (new_public_client, new_private_client, new_unified_client,
                                        available_venues, ClientManager)

__version__ = "0.1.0"

__all__ = [
    'CcexError',
    'TransportFailure',
    'DecodeFailure',
    'SchemaMismatch',
    'AuthFailure',
    'VenueError',
    'UnknownPair',
    'PrecisionUnknown',
    'UnknownVenue',
    'InsufficientDepth',
    'OrderType',
    'CurrencyPair',
    'Precisions',
    'TradeFee',
    'Asset',
    'OrderBookTick',
    'Balance',
    'Order',
    'Board',
    'BoardBar',
    'new_public_client',
    'new_private_client',
    'new_unified_client',
    'available_venues',
    'ClientManager',
]
