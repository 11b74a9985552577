# -*- coding: utf-8 -*-
# ccex/drivers/__init__.py
# One package per venue
