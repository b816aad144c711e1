#!/usr/bin/env python3
"""
asusd backends.

Two interchangeable implementations of ProfileBackend: the D-Bus property
interface of asusd and the asusctl command line tool. The backend modules
import PyGObject and dasbus, so they are loaded on demand by select_backend.
"""
