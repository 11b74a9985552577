# -*- coding: utf-8 -*-
# ccex/core/__init__.py
