# -*- coding: utf-8 -*-
"""SoraBridge: Sora2API connection management."""

__version__ = "0.1.0"
