# -*- coding: utf-8 -*-
# ccex/core/runtime/__init__.py
# Transport, signing, caches and the venue registry
