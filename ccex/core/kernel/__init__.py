# -*- coding: utf-8 -*-
# ccex/core/kernel/__init__.py
# Contracts, value types and errors
