#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Bark Lead Decoder.

Decodes service-provider directory pages into scored CRM leads and stores
the accepted ones as contacts.
"""

__version__ = "0.3.0"
__author__ = "Traffik Boosters"
